"""
LLM configuration for Storybook Studio.

Story text and drawing analysis both go through DSPy. The caller may ask
for a specific model (a user's preferred model); when that model's
provider key is missing we fall back to the first provider that is
configured.

Priority order for the default model:
1. Gemini 3 Pro (GOOGLE_API_KEY)
2. GPT-5 (OPENAI_API_KEY)
3. Claude Sonnet 4.5 (ANTHROPIC_API_KEY)
"""

import logging
import os
from typing import Optional

import dspy
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

# Timeout for LLM calls (seconds)
LLM_TIMEOUT = 120

# Public model name -> (litellm model id, env var holding the key)
SUPPORTED_MODELS = {
    "gemini-3-pro-preview": ("gemini/gemini-3-pro-preview", "GOOGLE_API_KEY"),
    "gemini-2.5-flash": ("gemini/gemini-2.5-flash", "GOOGLE_API_KEY"),
    "gpt-5": ("openai/gpt-5", "OPENAI_API_KEY"),
    "gpt-4.1": ("openai/gpt-4.1", "OPENAI_API_KEY"),
    "claude-sonnet-4-5": ("anthropic/claude-sonnet-4-5", "ANTHROPIC_API_KEY"),
}

DEFAULT_MODEL_ORDER = ("gemini-3-pro-preview", "gpt-5", "claude-sonnet-4-5")


def _build_lm(model_name: str) -> dspy.LM:
    """Create a dspy.LM for one of the supported public model names."""
    model_id, key_env = SUPPORTED_MODELS[model_name]
    if model_id.startswith("openai/gpt-5"):
        return dspy.LM(
            model_id,
            api_key=os.getenv(key_env),
            max_tokens=16000,  # GPT-5 reasoning models require >= 16000
            temperature=1.0,   # GPT-5 reasoning models require 1.0
            timeout=LLM_TIMEOUT,
        )
    return dspy.LM(
        model_id,
        api_key=os.getenv(key_env),
        max_tokens=4096,
        temperature=0.9,
        timeout=LLM_TIMEOUT,
    )


def resolve_model_name(requested: Optional[str] = None) -> str:
    """
    Pick the model that will actually serve a request.

    Returns the requested model when it is supported and its provider key
    is set, otherwise the first configured default.

    Raises:
        ValueError: If no provider key is configured at all
    """
    if requested in SUPPORTED_MODELS:
        _, key_env = SUPPORTED_MODELS[requested]
        if os.getenv(key_env):
            return requested
        logger.warning(f"Model {requested} requested but {key_env} is not set, using default")

    for name in DEFAULT_MODEL_ORDER:
        _, key_env = SUPPORTED_MODELS[name]
        if os.getenv(key_env):
            return name

    raise ValueError(
        "No API key found. Set GOOGLE_API_KEY, OPENAI_API_KEY, or ANTHROPIC_API_KEY in .env"
    )


def get_story_lm(model: Optional[str] = None) -> dspy.LM:
    """Get the LM used to write stories, honouring a preferred model."""
    return _build_lm(resolve_model_name(model))


def get_vision_lm() -> dspy.LM:
    """Get the LM used to analyze drawings. All default models accept images."""
    return _build_lm(resolve_model_name(None))


def get_inference_model_name(model: Optional[str] = None) -> str:
    """Get the name of the model that will be used, or "unknown"."""
    try:
        return resolve_model_name(model)
    except ValueError:
        return "unknown"
