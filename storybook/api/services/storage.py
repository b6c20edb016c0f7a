"""
Book image storage.

Images live under ``DATA_DIR/book-images/<book_id>/`` and are served
publicly by the API at ``/storage/book-images/<book_id>/<file>``. Page
files are named ``page-<index>`` (zero-based); an uploaded drawing used
as the cover is ``page--1``.
"""

import asyncio
import logging
import shutil
from pathlib import Path
from typing import Optional

from ...core.images import extension_for, parse_data_url
from ...core.types import PageImage
from .. import config

logger = logging.getLogger(__name__)

COVER_INDEX = -1


class BookImageStorage:
    """Local object storage with public URLs."""

    def __init__(self, base_dir: Optional[Path] = None, public_base_url: Optional[str] = None):
        self.base_dir = Path(base_dir or config.BOOK_IMAGES_DIR)
        self.public_base_url = (public_base_url or config.PUBLIC_BASE_URL).rstrip("/")

    def public_url(self, book_id: str, filename: str) -> str:
        return f"{self.public_base_url}/storage/{config.BOOK_IMAGES_BUCKET}/{book_id}/{filename}"

    def path_for(self, book_id: str, filename: str) -> Optional[Path]:
        """Resolve a stored file, refusing paths outside the bucket."""
        path = (self.base_dir / book_id / filename).resolve()
        if not path.is_relative_to(self.base_dir.resolve()):
            return None
        return path

    async def save(self, book_id: str, filename: str, data: bytes) -> str:
        """Write a file and return its public URL."""
        book_dir = self.base_dir / book_id
        path = book_dir / filename

        def _write():
            book_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        await asyncio.to_thread(_write)
        return self.public_url(book_id, filename)

    async def save_page(self, book_id: str, index: int, image: Optional[PageImage]) -> Optional[str]:
        if image is None:
            return None
        filename = f"page-{index}.{extension_for(image.mime_type)}"
        return await self.save(book_id, filename, image.data)

    async def upload_pages(self, book_id: str, images: list[Optional[PageImage]]) -> list[Optional[str]]:
        """Upload page images concurrently. Missing images stay None."""
        urls = await asyncio.gather(
            *(self.save_page(book_id, index, image) for index, image in enumerate(images))
        )
        logger.info(f"Uploaded {sum(1 for u in urls if u)} page images for {book_id}")
        return list(urls)

    async def upload_drawing(self, book_id: str, data_url: str) -> str:
        """Store the child's drawing as the book cover."""
        mime_type, data = parse_data_url(data_url)
        return await self.save_page(book_id, COVER_INDEX, PageImage(data=data, mime_type=mime_type))

    async def delete_book(self, book_id: str) -> None:
        """Remove every stored image of a book."""
        book_dir = self.base_dir / book_id
        if book_dir.exists():
            await asyncio.to_thread(shutil.rmtree, book_dir)
