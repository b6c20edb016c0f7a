"""Repositories for profiles, subscriptions, roles and children."""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import asyncpg

from ..models.responses import ChildResponse, ProfileResponse

PROFILE_COLUMNS = """
    id, user_id, email, display_name, avatar_url, age, gender,
    favorite_color, favorite_animal, favorite_team, favorite_toy,
    favorite_superhero, favorite_cartoon, preferred_ai_model,
    preferred_image_model, preferred_language, preferred_page_count,
    created_at, updated_at
"""

PROFILE_UPDATABLE = (
    "display_name", "avatar_url", "age", "gender",
    "favorite_color", "favorite_animal", "favorite_team", "favorite_toy",
    "favorite_superhero", "favorite_cartoon", "preferred_ai_model",
    "preferred_image_model", "preferred_language", "preferred_page_count",
)

CHILD_COLUMNS = """
    id, user_id, name, age, gender, avatar_emoji,
    favorite_color, favorite_animal, favorite_team, favorite_toy,
    favorite_superhero, favorite_cartoon, created_at, updated_at
"""

CHILD_UPDATABLE = (
    "name", "age", "gender", "avatar_emoji",
    "favorite_color", "favorite_animal", "favorite_team", "favorite_toy",
    "favorite_superhero", "favorite_cartoon",
)

SUBSCRIPTION_COLUMNS = """
    tier, monthly_credits, used_credits, max_pages, max_children, price_tl,
    trial_ends_at, current_period_start, current_period_end
"""

BILLING_PERIOD = timedelta(days=30)


def _set_clause(fields: dict, start: int) -> tuple[str, list]:
    """Build ``col = $n`` assignments for a partial update."""
    assignments = []
    values = []
    for offset, (name, value) in enumerate(fields.items()):
        assignments.append(f"{name} = ${start + offset}")
        values.append(value)
    return ", ".join(assignments), values


class AccountRepository:
    """Profile, subscription and role persistence."""

    def __init__(self, conn: asyncpg.Connection):
        self.conn = conn

    # === Profile ===

    async def get_profile(self, user_id: str) -> Optional[ProfileResponse]:
        row = await self.conn.fetchrow(
            f"SELECT {PROFILE_COLUMNS} FROM profiles WHERE user_id = $1",
            user_id,
        )
        return ProfileResponse.model_validate(dict(row)) if row else None

    async def create_profile(
        self, user_id: str, email: Optional[str], display_name: str
    ) -> ProfileResponse:
        """Insert a profile; a concurrent insert for the same user wins."""
        row = await self.conn.fetchrow(
            f"""
            INSERT INTO profiles (id, user_id, email, display_name)
            VALUES ($1, $2, $3, $4)
            ON CONFLICT (user_id) DO UPDATE SET email = COALESCE(profiles.email, EXCLUDED.email)
            RETURNING {PROFILE_COLUMNS}
            """,
            str(uuid.uuid4()),
            user_id,
            email,
            display_name,
        )
        return ProfileResponse.model_validate(dict(row))

    async def update_profile(self, user_id: str, fields: dict) -> Optional[ProfileResponse]:
        """Update the given profile fields and stamp updated_at."""
        fields = {k: v for k, v in fields.items() if k in PROFILE_UPDATABLE}
        if not fields:
            return await self.get_profile(user_id)

        assignments, values = _set_clause(fields, start=2)
        row = await self.conn.fetchrow(
            f"""
            UPDATE profiles
            SET {assignments}, updated_at = NOW()
            WHERE user_id = $1
            RETURNING {PROFILE_COLUMNS}
            """,
            user_id,
            *values,
        )
        return ProfileResponse.model_validate(dict(row)) if row else None

    # === Subscription ===

    async def get_subscription(self, user_id: str) -> Optional[dict]:
        row = await self.conn.fetchrow(
            f"SELECT {SUBSCRIPTION_COLUMNS} FROM subscriptions WHERE user_id = $1",
            user_id,
        )
        return dict(row) if row else None

    async def create_subscription(self, user_id: str, limits: dict, trial_months: int = 0) -> dict:
        """Create a subscription with the given tier limits."""
        now = datetime.now(timezone.utc)
        trial_ends_at = now + timedelta(days=30 * trial_months) if trial_months else None
        row = await self.conn.fetchrow(
            f"""
            INSERT INTO subscriptions
                (id, user_id, tier, monthly_credits, used_credits, max_pages, max_children,
                 price_tl, trial_ends_at, current_period_start, current_period_end)
            VALUES ($1, $2, $3, $4, 0, $5, $6, $7, $8, $9, $10)
            ON CONFLICT (user_id) DO UPDATE SET updated_at = subscriptions.updated_at
            RETURNING {SUBSCRIPTION_COLUMNS}
            """,
            str(uuid.uuid4()),
            user_id,
            limits["tier"],
            limits["monthly_credits"],
            limits["max_pages"],
            limits["max_children"],
            limits["price_tl"],
            trial_ends_at,
            now,
            now + BILLING_PERIOD,
        )
        return dict(row)

    async def change_tier(self, user_id: str, limits: dict) -> Optional[dict]:
        """Switch plan: copy the tier limits and reset used credits."""
        row = await self.conn.fetchrow(
            f"""
            UPDATE subscriptions
            SET tier = $2,
                monthly_credits = $3,
                max_pages = $4,
                max_children = $5,
                price_tl = $6,
                used_credits = 0,
                updated_at = NOW()
            WHERE user_id = $1
            RETURNING {SUBSCRIPTION_COLUMNS}
            """,
            user_id,
            limits["tier"],
            limits["monthly_credits"],
            limits["max_pages"],
            limits["max_children"],
            limits["price_tl"],
        )
        return dict(row) if row else None

    async def use_story_credit(self, user_id: str) -> bool:
        """Consume one credit. Returns False when none are left."""
        used = await self.conn.fetchval(
            """
            UPDATE subscriptions
            SET used_credits = used_credits + 1, updated_at = NOW()
            WHERE user_id = $1
              AND (monthly_credits = -1 OR used_credits < monthly_credits)
            RETURNING used_credits
            """,
            user_id,
        )
        return used is not None

    async def reset_credits(self, user_id: str) -> bool:
        result = await self.conn.execute(
            "UPDATE subscriptions SET used_credits = 0, updated_at = NOW() WHERE user_id = $1",
            user_id,
        )
        return result == "UPDATE 1"

    # === Roles ===

    async def is_admin(self, user_id: str) -> bool:
        return bool(
            await self.conn.fetchval(
                "SELECT EXISTS(SELECT 1 FROM user_roles WHERE user_id = $1 AND role = 'admin')",
                user_id,
            )
        )

    async def set_admin(self, user_id: str, make_admin: bool) -> None:
        if make_admin:
            await self.conn.execute(
                """
                INSERT INTO user_roles (id, user_id, role)
                VALUES ($1, $2, 'admin')
                ON CONFLICT (user_id, role) DO NOTHING
                """,
                str(uuid.uuid4()),
                user_id,
            )
        else:
            await self.conn.execute(
                "DELETE FROM user_roles WHERE user_id = $1 AND role = 'admin'",
                user_id,
            )


class ChildRepository:
    """Child profile persistence."""

    def __init__(self, conn: asyncpg.Connection):
        self.conn = conn

    async def list_children(self, user_id: str) -> list[ChildResponse]:
        """A user's children, oldest first."""
        rows = await self.conn.fetch(
            f"SELECT {CHILD_COLUMNS} FROM children WHERE user_id = $1 ORDER BY created_at",
            user_id,
        )
        return [ChildResponse.model_validate(dict(row)) for row in rows]

    async def count_children(self, user_id: str) -> int:
        return await self.conn.fetchval(
            "SELECT COUNT(*) FROM children WHERE user_id = $1",
            user_id,
        )

    async def get_child(self, child_id: str, user_id: str) -> Optional[ChildResponse]:
        row = await self.conn.fetchrow(
            f"SELECT {CHILD_COLUMNS} FROM children WHERE id = $1 AND user_id = $2",
            child_id,
            user_id,
        )
        return ChildResponse.model_validate(dict(row)) if row else None

    async def create_child(self, user_id: str, fields: dict) -> ChildResponse:
        fields = {k: v for k, v in fields.items() if k in CHILD_UPDATABLE}
        columns = ["id", "user_id", *fields]
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        row = await self.conn.fetchrow(
            f"""
            INSERT INTO children ({", ".join(columns)})
            VALUES ({placeholders})
            RETURNING {CHILD_COLUMNS}
            """,
            str(uuid.uuid4()),
            user_id,
            *fields.values(),
        )
        return ChildResponse.model_validate(dict(row))

    async def update_child(self, child_id: str, user_id: str, fields: dict) -> Optional[ChildResponse]:
        fields = {k: v for k, v in fields.items() if k in CHILD_UPDATABLE}
        if not fields:
            return await self.get_child(child_id, user_id)

        assignments, values = _set_clause(fields, start=3)
        row = await self.conn.fetchrow(
            f"""
            UPDATE children
            SET {assignments}, updated_at = NOW()
            WHERE id = $1 AND user_id = $2
            RETURNING {CHILD_COLUMNS}
            """,
            child_id,
            user_id,
            *values,
        )
        return ChildResponse.model_validate(dict(row)) if row else None

    async def delete_child(self, child_id: str, user_id: str) -> bool:
        result = await self.conn.execute(
            "DELETE FROM children WHERE id = $1 AND user_id = $2",
            child_id,
            user_id,
        )
        return result == "DELETE 1"
