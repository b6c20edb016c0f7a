"""API tests for reading sessions, progress, likes, comments and shares."""

from storybook.api.models.responses import (
    ChildReadingStatsResponse,
    CommentResponse,
    ReadingProgressResponse,
    ReadingSessionResponse,
)


def make_session(**overrides) -> ReadingSessionResponse:
    fields = {"id": "s1", "user_id": "user-123", "book_id": "book-1"}
    fields.update(overrides)
    return ReadingSessionResponse(**fields)


class TestReadingSessions:
    def test_start_session(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["reading"].start_session.return_value = make_session(child_id="c1")

        response = client.post("/reading/sessions", json={"book_id": "book-1", "child_id": "c1"})

        assert response.status_code == 201
        assert response.json()["id"] == "s1"
        mocks["reading"].start_session.assert_awaited_once_with("user-123", "book-1", "c1")

    def test_start_session_on_foreign_book_is_404(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["reading"].can_access.return_value = False

        response = client.post("/reading/sessions", json={"book_id": "other-book", "child_id": "c1"})

        assert response.status_code == 404
        mocks["reading"].can_access.assert_awaited_once_with("user-123", "other-book", "c1")
        mocks["reading"].start_session.assert_not_called()

    def test_update_session(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["reading"].update_session.return_value = make_session(pages_read=3, duration_seconds=90)

        response = client.patch("/reading/sessions/s1", json={"pages_read": 3, "duration_seconds": 90})

        assert response.status_code == 200
        assert response.json()["pages_read"] == 3
        mocks["reading"].update_session.assert_awaited_once_with("s1", "user-123", 3, duration_seconds=90)

    def test_end_session(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["reading"].update_session.return_value = make_session(pages_read=5)

        response = client.post("/reading/sessions/s1/end", json={"pages_read": 5})

        assert response.status_code == 200
        mocks["reading"].update_session.assert_awaited_once_with(
            "s1", "user-123", 5, duration_seconds=None, end=True
        )

    def test_missing_session_is_404(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["reading"].update_session.return_value = None

        assert client.patch("/reading/sessions/nope", json={"pages_read": 1}).status_code == 404

    def test_negative_pages_rejected(self, client_with_mocks):
        client, _ = client_with_mocks
        assert client.patch("/reading/sessions/s1", json={"pages_read": -1}).status_code == 422


class TestReadingStats:
    def test_stats_include_formatted_time(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["reading"].get_child_stats.return_value = [
            ChildReadingStatsResponse(child_id="c1", child_name="Ada", total_reading_seconds=3900)
        ]

        response = client.get("/reading/stats")

        assert response.json()[0]["total_reading_time"] == "1 saat 5 dk"

    def test_stats_in_english(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["reading"].get_child_stats.return_value = [
            ChildReadingStatsResponse(child_id="c1", child_name="Ada", total_reading_seconds=120)
        ]

        response = client.get("/reading/stats", params={"language": "en"})

        assert response.json()[0]["total_reading_time"] == "2 minutes"


class TestReadingProgress:
    def test_unread_book_starts_at_zero(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["reading"].get_progress.return_value = None

        response = client.get("/reading/progress/book-1")

        assert response.json() == {
            "book_id": "book-1",
            "current_page": 0,
            "completed": False,
            "updated_at": None,
        }

    def test_save_progress(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["reading"].save_progress.return_value = ReadingProgressResponse(
            book_id="book-1", current_page=4, completed=True
        )

        response = client.put("/reading/progress/book-1", json={"current_page": 4, "completed": True})

        assert response.json()["completed"] is True
        mocks["reading"].save_progress.assert_awaited_once_with("user-123", "book-1", 4, True)

    def test_save_progress_on_foreign_book_is_404(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["reading"].can_access.return_value = False

        response = client.put("/reading/progress/other-book", json={"current_page": 1})

        assert response.status_code == 404
        mocks["reading"].save_progress.assert_not_called()


class TestLikes:
    def test_like_status(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["interactions"].is_liked.return_value = True
        mocks["interactions"].count_likes.return_value = 2

        response = client.get("/books/book-1/likes", params={"child_id": "c1"})

        assert response.json() == {"book_id": "book-1", "child_id": "c1", "liked": True, "like_count": 2}
        mocks["interactions"].is_liked.assert_awaited_once_with("user-123", "book-1", "c1")
        mocks["interactions"].count_likes.assert_awaited_once_with("user-123", "book-1")

    def test_like_status_requires_child(self, client_with_mocks):
        client, _ = client_with_mocks
        assert client.get("/books/book-1/likes").status_code == 422

    def test_toggle_like(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["interactions"].toggle_like.return_value = False
        mocks["interactions"].count_likes.return_value = 0

        response = client.post("/books/book-1/likes", json={"child_id": "c1"})

        assert response.json()["liked"] is False
        mocks["interactions"].toggle_like.assert_awaited_once_with("user-123", "book-1", "c1")

    def test_like_with_foreign_child_is_404(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["interactions"].can_access.return_value = False

        response = client.post("/books/book-1/likes", json={"child_id": "someone-elses-child"})

        assert response.status_code == 404
        mocks["interactions"].can_access.assert_awaited_once_with("user-123", "book-1", "someone-elses-child")
        mocks["interactions"].toggle_like.assert_not_called()


class TestComments:
    def test_add_comment_strips_and_defaults_emoji(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["interactions"].add_comment.return_value = CommentResponse(
            id="cm1", book_id="book-1", child_id="c1", user_id="user-123", content="Loved it", emoji="😊"
        )

        response = client.post("/books/book-1/comments", json={"child_id": "c1", "content": "  Loved it  "})

        assert response.status_code == 201
        mocks["interactions"].add_comment.assert_awaited_once_with(
            "user-123", "book-1", "c1", "Loved it", "😊"
        )

    def test_blank_comment_rejected(self, client_with_mocks):
        client, mocks = client_with_mocks

        response = client.post("/books/book-1/comments", json={"child_id": "c1", "content": "   "})

        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_REQUEST"
        mocks["interactions"].add_comment.assert_not_called()

    def test_list_comments(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["interactions"].list_comments.return_value = [
            CommentResponse(
                id="cm1", book_id="book-1", child_id="c1", user_id="user-123", content="Yay", child_name="Ada"
            )
        ]

        response = client.get("/books/book-1/comments")

        assert response.json()[0]["child_name"] == "Ada"
        mocks["interactions"].list_comments.assert_awaited_once_with("user-123", "book-1")

    def test_comment_on_foreign_book_is_404(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["interactions"].can_access.return_value = False

        response = client.post("/books/other-book/comments", json={"child_id": "c1", "content": "hi"})

        assert response.status_code == 404
        mocks["interactions"].add_comment.assert_not_called()

    def test_delete_missing_comment_is_404(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["interactions"].delete_comment.return_value = False

        assert client.delete("/books/book-1/comments/cm9").status_code == 404


class TestShares:
    def test_list_shares(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["interactions"].list_shares.return_value = ["c1", "c2"]

        response = client.get("/books/book-1/shares")

        assert response.json() == {"book_id": "book-1", "child_ids": ["c1", "c2"]}
        mocks["interactions"].list_shares.assert_awaited_once_with("user-123", "book-1")

    def test_replace_shares(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["interactions"].owned_child_ids.return_value = ["c2"]
        mocks["interactions"].replace_shares.return_value = ["c2"]

        response = client.put("/books/book-1/shares", json={"child_ids": ["c2"]})

        assert response.json()["child_ids"] == ["c2"]
        mocks["interactions"].replace_shares.assert_awaited_once_with("user-123", "book-1", ["c2"])

    def test_shares_on_foreign_book_are_404(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["interactions"].can_access.return_value = False

        response = client.put("/books/other-book/shares", json={"child_ids": []})

        assert response.status_code == 404
        mocks["interactions"].replace_shares.assert_not_called()

    def test_sharing_with_foreign_child_is_404(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["interactions"].owned_child_ids.return_value = ["c1"]

        response = client.put("/books/book-1/shares", json={"child_ids": ["c1", "stranger"]})

        assert response.status_code == 404
        mocks["interactions"].replace_shares.assert_not_called()

    def test_clearing_shares_needs_no_children(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["interactions"].owned_child_ids.return_value = []
        mocks["interactions"].replace_shares.return_value = []

        response = client.put("/books/book-1/shares", json={"child_ids": []})

        assert response.json() == {"book_id": "book-1", "child_ids": []}
