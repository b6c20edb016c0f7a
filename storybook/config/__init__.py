"""
Configuration module for Storybook Studio.

Re-exports vendor configuration for convenient access.
"""

from .llm import get_story_lm, get_vision_lm, get_inference_model_name, resolve_model_name
from .story import STORY_CONSTANTS, clamp_page_count, language_name
from .image import (
    IMAGE_CONSTANTS,
    get_image_client,
    get_image_model,
    get_image_config,
    extract_image_from_response,
)
from .tts import TTS_CONSTANTS, DEFAULT_VOICE_ID, get_tts_api_key

__all__ = [
    # LLM
    "get_story_lm",
    "get_vision_lm",
    "get_inference_model_name",
    "resolve_model_name",
    # Story
    "STORY_CONSTANTS",
    "clamp_page_count",
    "language_name",
    # Image
    "IMAGE_CONSTANTS",
    "get_image_client",
    "get_image_model",
    "get_image_config",
    "extract_image_from_response",
    # TTS
    "TTS_CONSTANTS",
    "DEFAULT_VOICE_ID",
    "get_tts_api_key",
]
