"""
Image generation configuration for Storybook Studio.

Page illustrations are generated with Gemini image models through the
google-genai SDK.
"""

import base64
import os
from typing import Optional

from dotenv import load_dotenv
from google import genai
from google.genai.types import GenerateContentConfig, Modality

# Load environment variables from .env file
load_dotenv()

# Image generation constants
IMAGE_CONSTANTS = {
    "model": "gemini-2.5-flash-image",
    "supported_models": (
        "gemini-2.5-flash-image",
        "gemini-3-pro-image-preview",
    ),
    "default_mime_type": "image/png",
}


def get_image_client() -> genai.Client:
    """
    Get the Gemini client for illustration generation.

    Uses GOOGLE_API_KEY from environment.
    """
    api_key = os.getenv("GOOGLE_API_KEY")
    if not api_key:
        raise ValueError("GOOGLE_API_KEY not found in environment. Set it in .env file.")

    return genai.Client(api_key=api_key)


def get_image_model(requested: Optional[str] = None) -> str:
    """Get the image model ID, falling back to the default for unknown names."""
    if requested in IMAGE_CONSTANTS["supported_models"]:
        return requested
    return IMAGE_CONSTANTS["model"]


def get_image_config() -> GenerateContentConfig:
    """Get the default config for image generation."""
    return GenerateContentConfig(
        temperature=1.0,
        top_k=40,
        top_p=0.95,
        response_modalities=[Modality.TEXT, Modality.IMAGE],
    )


def extract_image_from_response(response) -> tuple[bytes, str]:
    """
    Extract image bytes and MIME type from a Gemini API response.

    Args:
        response: The response from client.aio.models.generate_content()

    Returns:
        Tuple of (image bytes, MIME type)

    Raises:
        ValueError: If no image found in response
    """
    candidates = getattr(response, "candidates", None) or []
    if candidates and candidates[0].content:
        for part in candidates[0].content.parts or []:
            if hasattr(part, "inline_data") and part.inline_data:
                data = part.inline_data.data
                mime_type = part.inline_data.mime_type or IMAGE_CONSTANTS["default_mime_type"]
                raw = base64.b64decode(data) if isinstance(data, str) else data
                return raw, mime_type

    raise ValueError("No image found in response")
