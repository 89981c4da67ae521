"""ProfileRepository: read-only raw SQL access to profiles.

Only id, role and the mail address are consumed: role for authorization
checks, email for notifications.
"""

from typing import Any, Protocol

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.at_gateway.profile.models import Profile

_GET_PROFILE_SQL = text("""
    SELECT id, role, email, display_name
    FROM profiles
    WHERE id = CAST(:profile_id AS UUID)
""")


class ProfileRepositoryProtocol(Protocol):
    async def get_by_id(self, db: AsyncSession, profile_id: str) -> Profile | None: ...


def _row_to_profile(row: Any) -> Profile:
    return Profile(
        id=str(row.id),
        role=row.role,
        email=row.email,
        display_name=row.display_name,
    )


class ProfileRepository:
    async def get_by_id(self, db: AsyncSession, profile_id: str) -> Profile | None:
        result = await db.execute(_GET_PROFILE_SQL, {"profile_id": profile_id})
        row = result.fetchone()
        return _row_to_profile(row) if row else None
