"""
Page controller: owns the UI state of one browser session.

State changes only happen through reduce(state, event), which makes the
page's state machine explicit:

    idle -> loading_default -> ready <-> analyzing
    any state -> error on a failed operation, back on the next success

Every started operation bumps `generation`; completion events carry the
generation they were started with and are dropped when a newer operation
has been started since.
"""
import functools
import threading
from collections import OrderedDict
from enum import Enum
from typing import Callable, Union

from pydantic import BaseModel, ConfigDict

from ai_client import call_ai
from error_log import log_error
from errors import StoneIdentifierError, ValidationError
from image_acquisition import load_default_image, read_upload
from stone_content import DEFAULT_ANALYSIS, DEFAULT_IMAGE, STONE_PROMPT

ANALYZE_FAILED_MESSAGE = "Failed to analyze image. Please try again."


@functools.lru_cache(maxsize=4)
def _default_data_url(path: str) -> str:
    """The default photo is read once and shared by every session; failures are retried."""
    return load_default_image(path)


class Status(str, Enum):
    IDLE            = "idle"
    LOADING_DEFAULT = "loading_default"
    READY           = "ready"
    ANALYZING       = "analyzing"
    ERROR           = "error"


class PageState(BaseModel):
    model_config = ConfigDict(frozen=True)

    status:     Status = Status.IDLE
    image:      str | None = None   # data URL
    analysis:   str = ""
    loading:    bool = False
    error:      str | None = None
    generation: int = 0

    @property
    def can_analyze(self) -> bool:
        return self.image is not None and not self.loading


# ── Events ────────────────────────────────────────────────────────────────────

class DefaultLoadStarted(BaseModel):
    pass


class DefaultLoaded(BaseModel):
    generation: int
    image:      str
    analysis:   str


class ImageAccepted(BaseModel):
    image: str


class AnalysisStarted(BaseModel):
    pass


class AnalysisSucceeded(BaseModel):
    generation: int
    analysis:   str


class OperationFailed(BaseModel):
    message: str
    # None for failures that are not tied to a running operation (upload validation)
    generation: int | None = None


Event = Union[
    DefaultLoadStarted, DefaultLoaded, ImageAccepted,
    AnalysisStarted, AnalysisSucceeded, OperationFailed,
]


def reduce(state: PageState, event: Event) -> PageState:
    """Return the state that follows `state` after `event`."""
    if isinstance(event, DefaultLoadStarted):
        return state.model_copy(update={
            "status":     Status.LOADING_DEFAULT,
            "loading":    True,
            "error":      None,
            "generation": state.generation + 1,
        })

    if isinstance(event, DefaultLoaded):
        if event.generation != state.generation:
            return state
        return state.model_copy(update={
            "status":   Status.READY,
            "image":    event.image,
            "analysis": event.analysis,
            "loading":  False,
            "error":    None,
        })

    if isinstance(event, ImageAccepted):
        return state.model_copy(update={
            "status": Status.ANALYZING if state.loading else Status.READY,
            "image":  event.image,
            "error":  None,
        })

    if isinstance(event, AnalysisStarted):
        return state.model_copy(update={
            "status":     Status.ANALYZING,
            "loading":    True,
            "error":      None,
            "generation": state.generation + 1,
        })

    if isinstance(event, AnalysisSucceeded):
        if event.generation != state.generation:
            return state
        return state.model_copy(update={
            "status":   Status.READY,
            "analysis": event.analysis,
            "loading":  False,
            "error":    None,
        })

    if isinstance(event, OperationFailed):
        if event.generation is None:
            return state.model_copy(update={"status": Status.ERROR, "error": event.message})
        if event.generation != state.generation:
            return state
        return state.model_copy(update={
            "status":  Status.ERROR,
            "loading": False,
            "error":   event.message,
        })

    raise TypeError(f"Unknown event: {type(event).__name__}")


class PageController:
    """Wires user actions to image acquisition, the AI call and the reducer."""

    def __init__(
        self,
        analyze: Callable[[str, str], str] | None = None,
        default_image: str = DEFAULT_IMAGE,
        default_analysis: str = DEFAULT_ANALYSIS,
    ):
        self._analyze          = analyze
        self._default_image    = default_image
        self._default_analysis = default_analysis
        self._default_url      = None
        self._lock  = threading.Lock()
        self._state = PageState()

    @property
    def state(self) -> PageState:
        return self._state

    @property
    def image_bytes(self) -> int:
        """Memory held by an uploaded image; the shared default photo counts as 0."""
        image = self._state.image
        if image is None or image is self._default_url:
            return 0
        return len(image)

    def dispatch(self, event: Event) -> PageState:
        with self._lock:
            self._state = reduce(self._state, event)
            return self._state

    def _fail(self, context: str, exc: Exception, generation: int | None = None,
              message: str | None = None) -> PageState:
        # Rejected uploads are user mistakes, not failures worth keeping in the log
        if not isinstance(exc, ValidationError):
            log_error(context, exc)
        return self.dispatch(OperationFailed(message=message or str(exc), generation=generation))

    # ── Actions ───────────────────────────────────────────────────────────────

    def bootstrap(self) -> PageState:
        """Load the default content unless it (or a newer photo) is already there."""
        with self._lock:
            state = self._state
            if state.image is not None or state.analysis or state.loading:
                return state
            self._state = reduce(state, DefaultLoadStarted())
            generation = self._state.generation
        return self._load_default(generation)

    def _load_default(self, generation: int) -> PageState:
        try:
            image = _default_data_url(self._default_image)
        except StoneIdentifierError as e:
            return self._fail("default image", e, generation)
        self._default_url = image
        return self.dispatch(DefaultLoaded(
            generation=generation, image=image, analysis=self._default_analysis,
        ))

    def upload(self, file) -> PageState:
        """Accept a new photo and analyze it right away."""
        try:
            image = read_upload(file)
        except StoneIdentifierError as e:
            return self._fail("upload", e)

        self.dispatch(ImageAccepted(image=image))
        state = self.dispatch(AnalysisStarted())
        return self._run_analysis(image, state.generation)

    def reject(self, exc: StoneIdentifierError) -> PageState:
        """Record a failure detected before the controller saw the upload."""
        return self._fail("upload", exc)

    def reanalyze(self) -> PageState:
        """Identify Stone button: a no-op without an image or while an analysis runs."""
        with self._lock:
            if not self._state.can_analyze:
                return self._state
            self._state = reduce(self._state, AnalysisStarted())
            image, generation = self._state.image, self._state.generation
        return self._run_analysis(image, generation)

    def _run_analysis(self, image: str, generation: int) -> PageState:
        try:
            analyze = self._analyze or call_ai
            text = analyze(image, STONE_PROMPT)
        except StoneIdentifierError as e:
            return self._fail("analyze", e, generation)
        except Exception as e:
            return self._fail("analyze", e, generation, message=ANALYZE_FAILED_MESSAGE)
        return self.dispatch(AnalysisSucceeded(generation=generation, analysis=text))


class ControllerRegistry:
    """Thread-safe session id -> PageController map.

    Only sessions that changed something are registered; everyone else is
    served a fresh, unregistered controller showing the default content.
    Least recently used sessions are evicted once there are more than
    `max_sessions` of them or their uploaded images exceed `max_image_bytes`.
    """

    def __init__(
        self,
        max_sessions: int = 256,
        max_image_bytes: int = 512 * 1024 * 1024,
        factory: Callable[[], PageController] = PageController,
    ):
        self._max_sessions    = max_sessions
        self._max_image_bytes = max_image_bytes
        self._factory         = factory
        self._lock            = threading.Lock()
        self._controllers: OrderedDict[str, PageController] = OrderedDict()

    def new(self) -> PageController:
        """A controller that is not tracked by the registry."""
        return self._factory()

    def find(self, session_id: str) -> PageController | None:
        with self._lock:
            controller = self._controllers.get(session_id)
            if controller is not None:
                self._controllers.move_to_end(session_id)
            return controller

    def get(self, session_id: str) -> PageController:
        with self._lock:
            controller = self._controllers.get(session_id)
            if controller is None:
                controller = self._factory()
                self._controllers[session_id] = controller
            else:
                self._controllers.move_to_end(session_id)
            self._trim()
            return controller

    def trim(self) -> None:
        with self._lock:
            self._trim()

    def _trim(self) -> None:
        # The most recently used session always survives
        while len(self._controllers) > 1 and (
            len(self._controllers) > self._max_sessions
            or sum(c.image_bytes for c in self._controllers.values()) > self._max_image_bytes
        ):
            self._controllers.popitem(last=False)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._controllers

    def __len__(self) -> int:
        return len(self._controllers)
