"""
Centralized site configuration.
Edit this file to update the texts displayed on the page.
"""

SITE_CONFIG = {
    "title":    "Free Stone Identifier",
    "subtitle": "Upload a stone photo for educational identification and geological information",
    # Shown under the upload button
    "upload_hint": "PNG, JPG or JPEG (MAX. 20MB)",
    "results_heading": "Stone Analysis Results",
    # Footer — displayed at the bottom of the page
    "footer_tagline": (
        "AI-generated descriptions are for educational purposes only "
        "and may contain mistakes."
    ),
    "footer_model_note": (
        "This project uses free AI models by default. "
        "Speed and recognition quality may vary."
    ),
}
