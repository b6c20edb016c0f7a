"""Unit tests for local book image storage."""

import pytest

from storybook.core.images import to_data_url
from storybook.core.types import PageImage


class TestBookImageStorage:
    @pytest.mark.asyncio
    async def test_save_page_writes_file_and_returns_public_url(self, storage):
        url = await storage.save_page("book-1", 0, PageImage(data=b"png", mime_type="image/png"))

        assert url == "http://test/storage/book-images/book-1/page-0.png"
        assert (storage.base_dir / "book-1" / "page-0.png").read_bytes() == b"png"

    @pytest.mark.asyncio
    async def test_missing_page_image_is_skipped(self, storage):
        assert await storage.save_page("book-1", 0, None) is None

    @pytest.mark.asyncio
    async def test_upload_pages_keeps_alignment(self, storage):
        images = [PageImage(data=b"a"), None, PageImage(data=b"c", mime_type="image/jpeg")]

        urls = await storage.upload_pages("book-1", images)

        assert urls == [
            "http://test/storage/book-images/book-1/page-0.png",
            None,
            "http://test/storage/book-images/book-1/page-2.jpg",
        ]

    @pytest.mark.asyncio
    async def test_upload_drawing_is_stored_as_cover(self, storage):
        url = await storage.upload_drawing("book-1", to_data_url(b"drawing", "image/png"))

        assert url.endswith("/book-1/page--1.png")
        assert (storage.base_dir / "book-1" / "page--1.png").read_bytes() == b"drawing"

    @pytest.mark.asyncio
    async def test_delete_book_removes_directory(self, storage):
        await storage.save_page("book-1", 0, PageImage(data=b"a"))

        await storage.delete_book("book-1")

        assert not (storage.base_dir / "book-1").exists()

    @pytest.mark.asyncio
    async def test_delete_missing_book_is_noop(self, storage):
        await storage.delete_book("never-saved")

    def test_path_for_refuses_traversal(self, storage):
        assert storage.path_for("..", "secrets.txt") is None
        assert storage.path_for("book-1", "../../etc/passwd") is None

    def test_path_for_resolves_inside_bucket(self, storage):
        path = storage.path_for("book-1", "page-0.png")
        assert path == (storage.base_dir / "book-1" / "page-0.png").resolve()
