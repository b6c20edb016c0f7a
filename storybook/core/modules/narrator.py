"""
Text-to-speech narration with Cartesia.

The reader app plays narration as a single MP3 clip, so audio is
collected in full and returned base64-encoded.
"""

import base64
import logging
from typing import Optional

from cartesia import AsyncCartesia

from ...config.tts import DEFAULT_VOICE_ID, TTS_CONSTANTS, get_tts_api_key
from ..errors import InvalidRequestError, ServiceNotConfiguredError, translate_vendor_error

logger = logging.getLogger(__name__)


def validate_text(text: Optional[str]) -> str:
    """Check narration text, returning it stripped."""
    text = (text or "").strip()
    if not text:
        raise InvalidRequestError("Text is required")
    if len(text) > TTS_CONSTANTS["max_text_length"]:
        raise InvalidRequestError(
            f"Text must be at most {TTS_CONSTANTS['max_text_length']} characters"
        )
    return text


class Narrator:
    """Synthesize page text to MP3."""

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key if api_key is not None else get_tts_api_key()

    async def synthesize(
        self,
        text: str,
        voice_id: Optional[str] = None,
        language: Optional[str] = None,
    ) -> bytes:
        """
        Synthesize text to MP3 bytes.

        Raises:
            InvalidRequestError: If the text is empty or too long
            ServiceNotConfiguredError: If CARTESIA_API_KEY is not set
            StorybookError: Vendor failures mapped by status code
        """
        text = validate_text(text)
        if not self.api_key:
            logger.error("CARTESIA_API_KEY not configured")
            raise ServiceNotConfiguredError("TTS service not configured")

        voice = voice_id or DEFAULT_VOICE_ID
        logger.info(f"Starting TTS synthesis: {text[:50]}... (voice={voice})")

        client = AsyncCartesia(api_key=self.api_key)
        audio = bytearray()
        try:
            kwargs = {
                "model_id": TTS_CONSTANTS["model"],
                "transcript": text,
                "voice": {"mode": "id", "id": voice},
                "output_format": TTS_CONSTANTS["output_format"],
            }
            if language:
                kwargs["language"] = language
            async for chunk in client.tts.bytes(**kwargs):
                audio.extend(chunk)
        except Exception as e:
            raise translate_vendor_error(e, "Text-to-speech") from e
        finally:
            await client.close()

        logger.info(f"TTS synthesis complete: {len(audio)} bytes")
        return bytes(audio)

    async def synthesize_base64(
        self,
        text: str,
        voice_id: Optional[str] = None,
        language: Optional[str] = None,
    ) -> str:
        audio = await self.synthesize(text, voice_id=voice_id, language=language)
        return base64.b64encode(audio).decode()
