"""API tests for profile, children and subscription endpoints."""

from storybook.api.models.enums import SubscriptionTier
from storybook.api.models.responses import (
    BookResponse,
    ChildResponse,
    ProfileResponse,
    SubscriptionResponse,
)
from storybook.core.errors import ChildLimitReachedError


def make_subscription(**overrides) -> SubscriptionResponse:
    fields = {
        "tier": SubscriptionTier.MINIK_MASAL,
        "monthly_credits": 3,
        "used_credits": 1,
        "max_pages": 5,
        "max_children": 1,
        "price_tl": 0,
        "remaining_credits": 2,
        "is_in_trial": True,
        "can_create_story": True,
    }
    fields.update(overrides)
    return SubscriptionResponse(**fields)


class TestProfile:
    def test_get_profile_creates_on_first_access(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["account_service"].get_or_create_profile.return_value = ProfileResponse(
            id="p1", user_id="user-123", display_name="parent"
        )

        response = client.get("/profile")

        assert response.status_code == 200
        assert response.json()["display_name"] == "parent"
        user = mocks["account_service"].get_or_create_profile.call_args.args[0]
        assert user.email == "parent@example.com"

    def test_patch_only_sends_given_fields(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["account_service"].get_or_create_profile.return_value = ProfileResponse(id="p1", user_id="user-123")
        mocks["accounts"].update_profile.return_value = ProfileResponse(
            id="p1", user_id="user-123", preferred_language="en", preferred_page_count=8
        )

        response = client.patch("/profile", json={"preferred_language": "en", "preferred_page_count": 8})

        assert response.status_code == 200
        assert response.json()["preferred_page_count"] == 8
        mocks["accounts"].update_profile.assert_awaited_once_with(
            "user-123", {"preferred_language": "en", "preferred_page_count": 8}
        )

    def test_empty_patch_returns_profile(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["account_service"].get_or_create_profile.return_value = ProfileResponse(id="p1", user_id="user-123")

        response = client.patch("/profile", json={})

        assert response.status_code == 200
        mocks["accounts"].update_profile.assert_not_called()

    def test_invalid_page_preference(self, client_with_mocks):
        client, _ = client_with_mocks
        assert client.patch("/profile", json={"preferred_page_count": 50}).status_code == 422


class TestChildren:
    def test_list_children(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["children"].list_children.return_value = [
            ChildResponse(id="c1", user_id="user-123", name="Ada", avatar_emoji="👧")
        ]

        response = client.get("/children")

        assert [c["name"] for c in response.json()] == ["Ada"]

    def test_create_child(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["account_service"].create_child.return_value = ChildResponse(
            id="c1", user_id="user-123", name="Ada", age=5
        )

        response = client.post("/children", json={"name": "Ada", "age": 5})

        assert response.status_code == 201
        user, fields = mocks["account_service"].create_child.call_args.args
        assert fields == {"name": "Ada", "age": 5}

    def test_child_limit_is_403(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["account_service"].create_child.side_effect = ChildLimitReachedError()

        response = client.post("/children", json={"name": "Ada"})

        assert response.status_code == 403
        assert response.json()["error"] == "CHILD_LIMIT_REACHED"

    def test_update_child(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["children"].update_child.return_value = ChildResponse(id="c1", user_id="user-123", name="Ada", age=6)

        response = client.patch("/children/c1", json={"age": 6})

        assert response.json()["age"] == 6
        mocks["children"].update_child.assert_awaited_once_with("c1", "user-123", {"age": 6})

    def test_update_missing_child_is_404(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["children"].update_child.return_value = None

        assert client.patch("/children/nope", json={"age": 6}).status_code == 404

    def test_delete_child(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["children"].delete_child.return_value = True

        assert client.delete("/children/c1").status_code == 204

    def test_shared_books(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["books"].list_shared_books.return_value = [
            BookResponse(id="book-1", user_id="user-123", title="Shared", theme="space")
        ]

        response = client.get("/children/c1/shared-books")

        assert response.json()[0]["title"] == "Shared"
        mocks["books"].list_shared_books.assert_awaited_once_with("c1", "user-123")


class TestSubscription:
    def test_get_subscription(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["account_service"].get_subscription.return_value = make_subscription()

        response = client.get("/subscription")

        assert response.status_code == 200
        data = response.json()
        assert data["remaining_credits"] == 2
        assert data["is_in_trial"] is True

    def test_plans_are_public(self, client_with_mocks):
        client, _ = client_with_mocks

        response = client.get("/subscription/plans")

        assert response.status_code == 200
        tiers = [p["tier"] for p in response.json()]
        assert tiers == ["minik_masal", "masal_kesfifcisi", "masal_kahramani", "sonsuz_masal"]

    def test_change_tier(self, client_with_mocks):
        client, mocks = client_with_mocks
        mocks["account_service"].change_tier.return_value = make_subscription(
            tier=SubscriptionTier.SONSUZ_MASAL, monthly_credits=-1, used_credits=0, remaining_credits=-1
        )

        response = client.put("/subscription/tier", json={"tier": "sonsuz_masal"})

        assert response.status_code == 200
        assert response.json()["remaining_credits"] == -1
        assert mocks["account_service"].change_tier.call_args.args[1] == SubscriptionTier.SONSUZ_MASAL

    def test_unknown_tier_is_422(self, client_with_mocks):
        client, _ = client_with_mocks
        assert client.put("/subscription/tier", json={"tier": "gold"}).status_code == 422
