"""
Text-to-speech configuration for Storybook Studio.

Narration is synthesized with Cartesia and returned to the reader as MP3.
"""

import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

TTS_CONSTANTS = {
    "model": "sonic-3",
    "max_text_length": 5000,  # Max characters per TTS request
    "output_format": {
        "container": "mp3",
        "sample_rate": 44100,
        "bit_rate": 128000,
    },
}

# Default voice - can be overridden per request
DEFAULT_VOICE_ID = os.getenv("CARTESIA_VOICE_ID", "a0e99841-438c-4a64-b679-ae501e7d6091")


def get_tts_api_key() -> str:
    """Get the Cartesia API key ("" when not configured)."""
    return os.getenv("CARTESIA_API_KEY", "")
