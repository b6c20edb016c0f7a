"""API tests for the generation endpoints."""

from unittest.mock import AsyncMock, MagicMock, patch

from storybook.api.models.enums import SubscriptionTier
from storybook.api.services.subscriptions import SubscriptionStatus, tier_limits
from storybook.core.errors import PaymentRequiredError, RateLimitError, ServiceNotConfiguredError
from storybook.core.types import DrawingAnalysis, GeneratedStory, PageImage, StoryPage

ROUTES = "storybook.api.routes.generation"
DRAWING = "data:image/png;base64,iVBORw0KGgo="


def make_story() -> GeneratedStory:
    return GeneratedStory(
        title="Tosbi Swims",
        pages=[StoryPage(character="Tosbi", emoji="🐢", title="Splash", description="Tosbi jumps in.")],
        theme="swimming",
    )


class TestGenerateStory:
    """Tests for POST /generate/story."""

    def test_returns_story_json(self, client_with_mocks):
        client, _ = client_with_mocks
        writer = MagicMock(return_value=make_story())

        with patch(f"{ROUTES}.story_writer_for", return_value=writer) as factory:
            response = client.post(
                "/generate/story",
                json={"theme": "swimming", "language": "en", "page_count": 3, "model": "gpt-4o"},
            )

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Tosbi Swims"
        assert data["pages"][0] == {
            "character": "Tosbi",
            "emoji": "🐢",
            "title": "Splash",
            "description": "Tosbi jumps in.",
            "sound": "pop",
        }
        factory.assert_called_once_with("gpt-4o")
        assert writer.call_args.kwargs["page_count"] == 3
        assert writer.call_args.kwargs["language"] == "en"

    def test_page_count_capped_by_plan(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["account_service"].get_status.return_value = SubscriptionStatus(
            subscription=tier_limits(SubscriptionTier.MINIK_MASAL)
        )
        writer = MagicMock(return_value=make_story())

        with patch(f"{ROUTES}.story_writer_for", return_value=writer):
            response = client.post("/generate/story", json={"theme": "swimming", "page_count": 20})

        assert response.status_code == 200
        assert writer.call_args.kwargs["page_count"] == 5

    def test_requires_theme(self, client_with_mocks):
        client, _ = client_with_mocks
        response = client.post("/generate/story", json={"theme": ""})
        assert response.status_code == 422

    def test_page_count_out_of_range(self, client_with_mocks):
        client, _ = client_with_mocks
        response = client.post("/generate/story", json={"theme": "x", "page_count": 21})
        assert response.status_code == 422

    def test_vendor_credits_exhausted_is_402(self, client_with_mocks):
        client, _ = client_with_mocks
        writer = MagicMock(side_effect=PaymentRequiredError())

        with patch(f"{ROUTES}.story_writer_for", return_value=writer):
            response = client.post("/generate/story", json={"theme": "swimming"})

        assert response.status_code == 402
        assert response.json()["error"] == "PAYMENT_REQUIRED"

    def test_no_llm_key_is_503(self, client_with_mocks):
        client, _ = client_with_mocks

        with patch(f"{ROUTES}.story_writer_for", side_effect=ServiceNotConfiguredError("No LLM API key configured")):
            response = client.post("/generate/story", json={"theme": "swimming"})

        assert response.status_code == 503
        assert response.json() == {"error": "SERVICE_NOT_CONFIGURED", "message": "No LLM API key configured"}

    def test_requires_authentication(self, client_with_mocks):
        client, _ = client_with_mocks
        from storybook.api.dependencies import get_current_user
        from storybook.api.main import app

        del app.dependency_overrides[get_current_user]
        response = client.post("/generate/story", json={"theme": "swimming"})

        assert response.status_code in (401, 403)

    def test_invalid_token_is_401(self, client_with_mocks):
        client, _ = client_with_mocks
        from storybook.api.dependencies import get_current_user
        from storybook.api.main import app

        del app.dependency_overrides[get_current_user]
        response = client.post(
            "/generate/story",
            json={"theme": "swimming"},
            headers={"Authorization": "Bearer not-a-jwt"},
        )

        assert response.status_code == 401


class TestGenerateStoryFromDrawing:
    """Tests for POST /generate/story-from-drawing."""

    def test_returns_story_and_analysis(self, client_with_mocks):
        client, _ = client_with_mocks
        analysis = DrawingAnalysis(colors=["blue"], theme="ocean", mood="calm", title="Sea")
        analyzer = MagicMock(return_value=analysis)
        writer = MagicMock()
        writer.write_from_drawing = MagicMock(return_value=make_story())

        with patch(f"{ROUTES}.drawing_analyzer", return_value=analyzer), \
             patch(f"{ROUTES}.story_writer_for", return_value=writer):
            response = client.post(
                "/generate/story-from-drawing",
                json={"image_base64": DRAWING, "user_description": "my cat at the beach"},
            )

        assert response.status_code == 200
        data = response.json()
        assert data["story"]["title"] == "Tosbi Swims"
        assert data["analysis"] == {"colors": ["blue"], "theme": "ocean", "mood": "calm"}
        assert writer.write_from_drawing.call_args.kwargs["user_description"] == "my cat at the beach"

    def test_page_count_capped_by_plan(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["account_service"].get_status.return_value = SubscriptionStatus(
            subscription=tier_limits(SubscriptionTier.MASAL_KESFIFCISI)
        )
        analyzer = MagicMock(return_value=DrawingAnalysis(colors=["red"], theme="farm", mood="happy"))
        writer = MagicMock()
        writer.write_from_drawing = MagicMock(return_value=make_story())

        with patch(f"{ROUTES}.drawing_analyzer", return_value=analyzer), \
             patch(f"{ROUTES}.story_writer_for", return_value=writer):
            response = client.post(
                "/generate/story-from-drawing",
                json={"image_base64": DRAWING, "page_count": 15},
            )

        assert response.status_code == 200
        assert writer.write_from_drawing.call_args.kwargs["page_count"] == 10

    def test_oversize_drawing_is_413(self, client_with_mocks):
        client, _ = client_with_mocks
        huge = "data:image/png;base64," + "A" * 11_000_000

        with patch(f"{ROUTES}.drawing_analyzer") as factory:
            response = client.post("/generate/story-from-drawing", json={"image_base64": huge})

        assert response.status_code == 413
        assert response.json()["error"] == "IMAGE_TOO_LARGE"
        factory.assert_not_called()

    def test_missing_drawing_is_400(self, client_with_mocks):
        client, _ = client_with_mocks
        response = client.post("/generate/story-from-drawing", json={})
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_IMAGE"


class TestGenerateBookImages:
    """Tests for POST /generate/book-images."""

    def test_returns_data_urls_and_nulls(self, client_with_mocks):
        client, _ = client_with_mocks
        illustrator = MagicMock()
        illustrator.illustrate_story = AsyncMock(return_value=[PageImage(data=b"abc"), None])

        with patch(f"{ROUTES}.page_illustrator_for", return_value=illustrator) as factory:
            response = client.post(
                "/generate/book-images",
                json={
                    "theme": "ocean",
                    "image_model": "gemini-3-pro-image-preview",
                    "pages": [
                        {"character": "Fish", "description": "A fish swims."},
                        {"character": "Crab", "description": "A crab waves."},
                    ],
                },
            )

        assert response.status_code == 200
        assert response.json() == {"images": ["data:image/png;base64,YWJj", None]}
        factory.assert_called_once_with("gemini-3-pro-image-preview")
        pages, theme = illustrator.illustrate_story.call_args.args
        assert [p.character for p in pages] == ["Fish", "Crab"]
        assert theme == "ocean"

    def test_rate_limit_is_429(self, client_with_mocks):
        client, _ = client_with_mocks
        illustrator = MagicMock()
        illustrator.illustrate_story = AsyncMock(side_effect=RateLimitError())

        with patch(f"{ROUTES}.page_illustrator_for", return_value=illustrator):
            response = client.post(
                "/generate/book-images",
                json={"theme": "ocean", "pages": [{"character": "Fish", "description": "Swims."}]},
            )

        assert response.status_code == 429
        assert response.json()["error"] == "RATE_LIMIT"

    def test_requires_pages(self, client_with_mocks):
        client, _ = client_with_mocks
        response = client.post("/generate/book-images", json={"theme": "ocean", "pages": []})
        assert response.status_code == 422


class TestGenerateSpeech:
    """Tests for POST /generate/speech."""

    def test_returns_base64_audio(self, client_with_mocks):
        client, _ = client_with_mocks
        narrator = MagicMock()
        narrator.synthesize_base64 = AsyncMock(return_value="SUQz")

        with patch(f"{ROUTES}.Narrator", return_value=narrator):
            response = client.post("/generate/speech", json={"text": "Merhaba", "voice_id": "v1", "language": "tr"})

        assert response.status_code == 200
        assert response.json() == {"audio_content": "SUQz"}
        narrator.synthesize_base64.assert_awaited_once_with("Merhaba", voice_id="v1", language="tr")

    def test_empty_text_is_400(self, client_with_mocks):
        client, _ = client_with_mocks
        with patch("storybook.core.modules.narrator.get_tts_api_key", return_value="key"):
            response = client.post("/generate/speech", json={"text": "  "})

        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_REQUEST"

    def test_missing_key_is_503(self, client_with_mocks):
        client, _ = client_with_mocks
        with patch("storybook.core.modules.narrator.get_tts_api_key", return_value=""):
            response = client.post("/generate/speech", json={"text": "Merhaba"})

        assert response.status_code == 503
        assert response.json()["error"] == "SERVICE_NOT_CONFIGURED"
