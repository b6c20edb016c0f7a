"""
Module for generating page illustrations with Gemini image models.

Every page of a story is illustrated concurrently. A page whose image
cannot be produced comes back as None so the book can still be saved,
except for rate-limit and credential errors, which abort the batch.
"""

import asyncio
import logging
from typing import Optional

from ...config.image import (
    extract_image_from_response,
    get_image_client,
    get_image_config,
    get_image_model,
)
from ..errors import RateLimitError, VendorAuthError, vendor_status_code
from ..types import PageImage, StoryPage

logger = logging.getLogger(__name__)


class PageIllustrator:
    """
    Generate one illustration per story page.

    Args:
        image_model: Preferred image model; unknown names use the default
        client: Optional google-genai client (tests inject a mock)
    """

    def __init__(self, image_model: Optional[str] = None, client=None):
        self.client = client or get_image_client()
        self.model = get_image_model(image_model)
        self.config = get_image_config()

    async def illustrate_page(self, page: StoryPage, theme: str) -> Optional[PageImage]:
        """
        Generate the illustration for a single page.

        Returns:
            PageImage, or None if the vendor produced no image

        Raises:
            RateLimitError: Vendor answered 429
            VendorAuthError: Vendor answered 401/403
        """
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=[page.illustration_prompt(theme)],
                config=self.config,
            )
            data, mime_type = extract_image_from_response(response)
            return PageImage(data=data, mime_type=mime_type)
        except Exception as e:
            status = vendor_status_code(e)
            if status == 429:
                raise RateLimitError("Image generation rate limit exceeded") from e
            if status in (401, 403):
                raise VendorAuthError("Image generation API key is invalid") from e
            logger.warning(f"Illustration failed for '{page.title}': {e}")
            return None

    async def illustrate_story(self, pages: list[StoryPage], theme: str) -> list[Optional[PageImage]]:
        """
        Illustrate all pages concurrently.

        Returns:
            List aligned with ``pages`` holding a PageImage or None per page
        """
        logger.info(f"Illustrating {len(pages)} pages with {self.model}")
        results = await asyncio.gather(
            *(self.illustrate_page(page, theme) for page in pages),
            return_exceptions=True,
        )

        # Surface batch-aborting errors in page order
        for result in results:
            if isinstance(result, BaseException):
                raise result

        generated = sum(1 for r in results if r is not None)
        logger.info(f"Illustrated {generated}/{len(pages)} pages")
        return list(results)
