"""Repository for admin-wide queries."""

import asyncpg

from ..models.responses import AdminStatisticsResponse, AdminUserResponse


class AdminRepository:
    """Cross-user reporting for the admin panel."""

    def __init__(self, conn: asyncpg.Connection):
        self.conn = conn

    async def list_users(self) -> list[AdminUserResponse]:
        """Every user with plan, usage counts and admin flag, newest first."""
        rows = await self.conn.fetch(
            """
            SELECT p.user_id,
                   p.email,
                   p.display_name,
                   p.created_at AS user_created_at,
                   s.tier,
                   COALESCE(s.monthly_credits, 0) AS monthly_credits,
                   COALESCE(s.used_credits, 0) AS used_credits,
                   COALESCE(s.max_pages, 0) AS max_pages,
                   COALESCE(s.max_children, 0) AS max_children,
                   s.trial_ends_at,
                   s.current_period_end,
                   (SELECT COUNT(*) FROM children c WHERE c.user_id = p.user_id) AS children_count,
                   (SELECT COUNT(*) FROM books b WHERE b.user_id = p.user_id) AS books_count,
                   (SELECT COALESCE(SUM(r.duration_seconds), 0)
                      FROM reading_sessions r WHERE r.user_id = p.user_id) AS total_reading_seconds,
                   EXISTS(SELECT 1 FROM user_roles ur
                          WHERE ur.user_id = p.user_id AND ur.role = 'admin') AS is_admin
            FROM profiles p
            LEFT JOIN subscriptions s ON s.user_id = p.user_id
            ORDER BY p.created_at DESC
            """
        )
        return [AdminUserResponse.model_validate(dict(row)) for row in rows]

    async def user_exists(self, user_id: str) -> bool:
        return bool(
            await self.conn.fetchval(
                "SELECT EXISTS(SELECT 1 FROM profiles WHERE user_id = $1)",
                user_id,
            )
        )

    async def get_statistics(self) -> AdminStatisticsResponse:
        row = await self.conn.fetchrow(
            """
            SELECT
                (SELECT COUNT(*) FROM profiles) AS total_users,
                (SELECT COUNT(*) FROM children) AS total_children,
                (SELECT COUNT(*) FROM books) AS total_books,
                (SELECT COUNT(*) FROM reading_sessions) AS total_reading_sessions,
                (SELECT COALESCE(SUM(duration_seconds), 0) FROM reading_sessions)
                    AS total_reading_seconds,
                (SELECT COUNT(*) FROM profiles
                  WHERE created_at >= date_trunc('month', NOW())) AS new_users_this_month,
                (SELECT COUNT(*) FROM books
                  WHERE created_at >= date_trunc('month', NOW())) AS books_this_month
            """
        )
        tier_rows = await self.conn.fetch(
            "SELECT tier, COUNT(*) AS count FROM subscriptions GROUP BY tier"
        )

        data = dict(row)
        total_seconds = data.pop("total_reading_seconds") or 0
        data["total_reading_hours"] = round(total_seconds / 3600, 1)
        data["users_by_tier"] = {r["tier"]: r["count"] for r in tier_rows}
        return AdminStatisticsResponse.model_validate(data)
