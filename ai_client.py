"""
AI client dispatcher.
Selects the active backend based on the AI_PROVIDER environment variable
and delegates all calls to it.

Supported backends (ai_backends/<name>.py, each must expose call()):
  gemini_api  — Google Gemini via google-genai SDK (default, plain text output)

To add a new backend:
  1. Create ai_backends/my_provider.py with a call() function matching the signature below.
  2. Set AI_PROVIDER=my_provider in .env.
"""
import os
import importlib

from dotenv import load_dotenv

from errors import InferenceError

load_dotenv()


def call_ai(image_data_url: str, prompt: str) -> str:
    """Send an image + prompt to the active AI backend and return its text.

    Args:
        image_data_url: The image as a base64 data URL.
        prompt:         Text prompt describing what to describe.

    Returns:
        The free-text answer of the model.

    Raises:
        InferenceError: on any failure; the message is shown to the user as is.
    """
    if not image_data_url:
        raise InferenceError("No image to analyze. Please upload a photo first.")

    load_dotenv(override=True)  # re-read .env so changes apply without server restart
    provider = os.environ.get("AI_PROVIDER", "gemini_api")
    try:
        backend = importlib.import_module(f"ai_backends.{provider}")
    except ModuleNotFoundError:
        raise InferenceError(
            f"AI backend '{provider}' not found. "
            f"Create ai_backends/{provider}.py or change AI_PROVIDER in .env."
        )
    return backend.call(image_data_url, prompt)
