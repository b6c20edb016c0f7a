"""Unit tests for drawing validation and data URL helpers."""

import pytest

from storybook.config import STORY_CONSTANTS
from storybook.core.errors import ImageTooLargeError, InvalidImageError
from storybook.core.images import extension_for, parse_data_url, to_data_url, validate_drawing


class TestValidateDrawing:
    def test_accepts_image_data_url(self):
        url = "data:image/png;base64,AAAA"
        assert validate_drawing(url) == url

    @pytest.mark.parametrize("value", ["", None])
    def test_rejects_empty(self, value):
        with pytest.raises(InvalidImageError):
            validate_drawing(value)

    def test_rejects_non_image(self):
        with pytest.raises(InvalidImageError):
            validate_drawing("data:text/plain;base64,AAAA")

    def test_rejects_oversize_payload(self):
        limit = STORY_CONSTANTS["max_drawing_data_url_length"]
        url = "data:image/png;base64," + "A" * limit
        with pytest.raises(ImageTooLargeError) as exc_info:
            validate_drawing(url)
        assert exc_info.value.status_code == 413

    def test_size_is_checked_before_format(self):
        """An oversize upload answers 413 even if it is not an image."""
        url = "x" * (STORY_CONSTANTS["max_drawing_data_url_length"] + 1)
        with pytest.raises(ImageTooLargeError):
            validate_drawing(url)


class TestDataUrls:
    def test_parse_returns_mime_and_bytes(self):
        mime, data = parse_data_url(to_data_url(b"\x89PNG", "image/png"))
        assert mime == "image/png"
        assert data == b"\x89PNG"

    def test_parse_rejects_plain_base64(self):
        with pytest.raises(InvalidImageError):
            parse_data_url("iVBORw0KGgo=")

    def test_extension_for_known_and_unknown_types(self):
        assert extension_for("image/jpeg") == "jpg"
        assert extension_for("IMAGE/WEBP") == "webp"
        assert extension_for("image/unknown") == "png"
