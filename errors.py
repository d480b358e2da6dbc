"""
Error kinds surfaced to the user.
Every one of them is recoverable: the page controller turns them into a
single message and the user simply tries again.
"""


class StoneIdentifierError(Exception):
    """Base class; str(exc) is the message shown on the page."""


class ValidationError(StoneIdentifierError):
    """Uploaded file has the wrong type, is too large, or is not an image."""


class ImageReadError(StoneIdentifierError, OSError):
    """An uploaded file or the bundled default image could not be read."""


class InferenceError(StoneIdentifierError):
    """The AI service failed or returned nothing usable."""
