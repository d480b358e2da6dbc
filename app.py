import os
import uuid

from flask import Flask, request, render_template, Response, redirect, url_for, session, jsonify
from dotenv import load_dotenv
from werkzeug.exceptions import RequestEntityTooLarge

from errors import ValidationError
from image_acquisition import TOO_LARGE_MESSAGE
from page_controller import ControllerRegistry, PageController, PageState
from response_formatter import format_analysis
from site_config import SITE_CONFIG
from stone_content import ACCEPTED_TYPES

load_dotenv()

app = Flask(__name__)
# Above the 20 MB image limit so oversized images reach the size check
# and get its message; bigger bodies are handled by too_large() below.
app.config["MAX_CONTENT_LENGTH"] = 32 * 1024 * 1024  # 32 MB
app.secret_key = os.environ.get("FLASK_SECRET_KEY") or os.urandom(32)

controllers = ControllerRegistry(
    max_sessions=int(os.environ.get("MAX_SESSIONS", "256")),
    max_image_bytes=int(os.environ.get("MAX_IMAGE_STORE_MB", "512")) * 1024 * 1024,
)


# ── Inject site config into every template automatically ──────────────────────
@app.context_processor
def inject_globals():
    return {"site": SITE_CONFIG, "accepted_types": ACCEPTED_TYPES}


# ── Helpers ───────────────────────────────────────────────────────────────────

def _page_state() -> PageState:
    """State to show: the session's own, or the default content for a session that did nothing yet."""
    sid = session.get("sid")
    controller = (controllers.find(sid) if sid else None) or controllers.new()
    return controller.bootstrap()


def _acting_controller() -> PageController:
    """Controller of the current session, registered on its first action."""
    sid = session.get("sid")
    if not sid:
        sid = uuid.uuid4().hex
        session["sid"] = sid
    controller = controllers.get(sid)
    # The page the user acted on showed the default content
    controller.bootstrap()
    return controller


# ── Routes ────────────────────────────────────────────────────────────────────

@app.errorhandler(RequestEntityTooLarge)
def too_large(exc):
    _acting_controller().reject(ValidationError(TOO_LARGE_MESSAGE))
    return redirect(url_for("index"))


@app.route("/robots.txt")
def robots_txt():
    return Response("User-agent: *\nDisallow: /\n", mimetype="text/plain")


@app.route("/")
def index():
    state = _page_state()
    return render_template(
        "index.html",
        state=state,
        fragments=format_analysis(state.analysis),
    )


@app.route("/upload", methods=["POST"])
def upload():
    file = request.files.get("image")
    if not file or not file.filename:
        return redirect(url_for("index"))

    state = _acting_controller().upload(file)
    controllers.trim()
    app.logger.info("upload %s: status=%s", file.filename, state.status.value)
    # Redirect so a reload never re-submits the photo; the file input comes back empty
    return redirect(url_for("index"))


@app.route("/analyze", methods=["POST"])
def analyze():
    state = _acting_controller().reanalyze()
    app.logger.info("analyze: status=%s", state.status.value)
    return redirect(url_for("index"))


@app.route("/state.json")
def state_json():
    state = _page_state()
    return jsonify({
        "status":     state.status.value,
        "has_image":  state.image is not None,
        "loading":    state.loading,
        "error":      state.error,
        "analysis":   state.analysis,
        "generation": state.generation,
        "fragments":  [f.model_dump() for f in format_analysis(state.analysis)],
    })


if __name__ == "__main__":
    print("Starting on http://localhost:5000")
    app.run(debug=True, port=5000)
