"""Identity Resolver — bearer token -> Identity, via access_tokens, profiles, user_roles.

Invariants:
    - Tokens are compared by SHA-256 digest only
    - Revoked tokens and tokens without a profile resolve to None
    - Roles are read at request time, so a revoked role takes effect immediately

Design Decisions:
    - Returns None instead of raising: the API dependency decides whether an
      anonymous caller is acceptable for the route
"""

import hashlib
import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mutual_aid.core.domain_types import UserStatus
from mutual_aid.core.identity import Identity, build_identity
from mutual_aid.models.access_token import AccessToken
from mutual_aid.models.profile import Profile
from mutual_aid.models.user_role import UserRole

logger = logging.getLogger(__name__)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


async def resolve_identity(db: AsyncSession, token: str) -> Identity | None:
    """Resolve a raw bearer token to the Identity it was issued for."""
    result = await db.execute(
        select(AccessToken.user_id).where(
            AccessToken.token_hash == hash_token(token),
            AccessToken.revoked_at.is_(None),
        ),
    )
    user_id = result.scalar_one_or_none()
    if user_id is None:
        return None
    return await load_identity(db, user_id)


async def load_identity(db: AsyncSession, user_id: UUID) -> Identity | None:
    profile = await db.get(Profile, user_id)
    if profile is None:
        logger.warning("Token resolved to a missing profile", extra={"user_id": str(user_id)})
        return None

    roles = await db.execute(
        select(UserRole.role).where(UserRole.user_id == user_id),
    )
    return build_identity(
        str(user_id),
        list(roles.scalars().all()),
        is_approved=profile.status == UserStatus.APPROVED.value,
    )
