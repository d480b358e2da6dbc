"""
AI backend: Google Gemini
Uses gemini-2.5-flash-lite (override with GEMINI_MODEL) with plain text output.
Requires GEMINI_API_KEY in environment.
"""
import os
import json

from google import genai
from google.genai import types

from errors import InferenceError
from image_acquisition import split_data_url

DEFAULT_MODEL = "gemini-2.5-flash-lite"


def _quota_message(msg: str) -> str:
    retry = ""
    try:
        data = json.loads(msg[msg.index("{"):])
        details = data.get("error", {}).get("details", [])
        for d in details:
            if d.get("@type", "").endswith("RetryInfo"):
                retry = f" Retry after: {d['retryDelay']}."
    except (ValueError, KeyError, AttributeError):
        pass
    return (
        f"Gemini API quota exceeded — free tier limit reached.{retry} "
        "Generate a new key at https://aistudio.google.com/apikey "
        "or wait and try again."
    )


def call(image_data_url: str, prompt: str) -> str:
    """Send an image + prompt to Gemini and return the text of the answer.

    Args:
        image_data_url: The image as a base64 data URL.
        prompt:         Text prompt to send alongside the image.

    Returns:
        The model's answer, stripped of surrounding whitespace.
    """
    api_key = os.environ.get("GEMINI_API_KEY")
    if not api_key:
        raise InferenceError(
            "GEMINI_API_KEY is not set. Copy .env.example to .env and add your key."
        )
    model = os.environ.get("GEMINI_MODEL", DEFAULT_MODEL)

    try:
        mime_type, image_bytes = split_data_url(image_data_url)
    except ValueError as e:
        raise InferenceError(f"The image could not be prepared for analysis: {e}") from e

    client = genai.Client(api_key=api_key)

    try:
        response = client.models.generate_content(
            model=model,
            contents=[
                types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
                prompt,
            ],
        )
    except Exception as e:
        msg = str(e)
        if "429" in msg or "RESOURCE_EXHAUSTED" in msg:
            raise InferenceError(_quota_message(msg)) from e
        raise InferenceError(f"Failed to analyze image: {msg or type(e).__name__}") from e

    # response.text raises on blocked candidates in some SDK versions
    try:
        text = response.text or ""
    except ValueError as e:
        raise InferenceError(f"The AI service returned no usable answer: {e}") from e

    text = text.strip()
    if not text:
        raise InferenceError("The AI service returned an empty response. Please try again.")
    return text
