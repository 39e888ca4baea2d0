"""User Approval — admins approve, reject or suspend member accounts.

Invariants:
    - Admin only (Profile update_status)
    - A role is granted only together with an approval, and granting twice is a no-op
    - Role changes take effect on the member's next request (roles are read per request)
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mutual_aid.api.dependencies import get_identity
from mutual_aid.core.domain_types import Action, ResourceType, UserStatus
from mutual_aid.core.identity import Identity
from mutual_aid.infrastructure.database import get_db
from mutual_aid.models.profile import Profile
from mutual_aid.models.user_role import UserRole
from mutual_aid.schemas.user import UserApproval
from mutual_aid.services.access_guard import authorize
from mutual_aid.services.rows import get_or_404, reload
from mutual_aid.services.snapshots import profile_snapshot

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/users", tags=["users"])


def _serialize(profile: Profile) -> dict:
    return {
        "id": str(profile.id),
        "full_name": profile.full_name,
        "email": profile.email,
        "status": profile.status,
        "roles": sorted(r.role for r in profile.roles),
        "updated_at": profile.updated_at.isoformat(),
    }


@router.get("/{user_id}")
async def get_profile(
    user_id: UUID,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    profile = await get_or_404(db, Profile, user_id, ResourceType.PROFILE)
    authorize(identity, ResourceType.PROFILE, profile_snapshot(profile), Action.READ)
    return {"data": _serialize(profile)}


@router.put("/{user_id}/approval")
async def set_approval(
    user_id: UUID,
    body: UserApproval,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """Set a member's account status; optionally grant a role on approval."""
    profile = await get_or_404(db, Profile, user_id, ResourceType.PROFILE)
    authorize(identity, ResourceType.PROFILE, profile_snapshot(profile), Action.UPDATE_STATUS)

    profile.status = body.status
    profile.updated_at = datetime.now(timezone.utc)

    if body.status == UserStatus.APPROVED.value and body.role:
        existing = await db.execute(
            select(UserRole).where(
                UserRole.user_id == user_id, UserRole.role == body.role,
            ),
        )
        if existing.scalar_one_or_none() is None:
            db.add(UserRole(user_id=user_id, role=body.role))

    await db.commit()
    profile = await reload(db, Profile, user_id)

    logger.info(
        f"User {user_id} status set to {body.status}",
        extra={"user_id": identity.id, "resource_id": str(user_id), "status_to": body.status},
    )
    return {
        "success": True,
        "data": _serialize(profile),
        "message": f"User {body.status} successfully",
    }
