"""Grievances — members file complaints; admins review and resolve them.

Invariants:
    - Non-admins only ever see their own grievances (list pre-filter + per-row policy)
    - Every update (status or admin_notes) is admin-only, including on one's own grievance
    - Entering resolved stamps resolved_at in the same conditional UPDATE
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mutual_aid.api.dependencies import get_identity
from mutual_aid.core.access_policy import list_scope
from mutual_aid.core.domain_types import Action, GrievanceStatus, ResourceType
from mutual_aid.core.errors import ErrorContext, InvalidInputError
from mutual_aid.core.identity import Identity
from mutual_aid.core.rejection import Rejection
from mutual_aid.core.transitions import request_transition
from mutual_aid.infrastructure.database import get_db
from mutual_aid.models.grievance import Grievance
from mutual_aid.schemas.grievance import GrievanceCreate, GrievanceUpdate
from mutual_aid.services.access_guard import authorize, raise_rejection
from mutual_aid.services.apply_transition import apply_transition
from mutual_aid.services.rows import get_or_404, reload
from mutual_aid.services.snapshots import draft, grievance_snapshot

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/grievances", tags=["grievances"])


def _serialize(grievance: Grievance) -> dict:
    return {
        "id": str(grievance.id),
        "user_id": str(grievance.user_id),
        "title": grievance.title,
        "description": grievance.description,
        "category": grievance.category,
        "status": grievance.status,
        "admin_notes": grievance.admin_notes,
        "resolved_at": (
            grievance.resolved_at.isoformat() if grievance.resolved_at else None
        ),
        "created_at": grievance.created_at.isoformat(),
        "updated_at": grievance.updated_at.isoformat(),
        "profiles": (
            {"full_name": grievance.author.full_name, "email": grievance.author.email}
            if grievance.author is not None else None
        ),
    }


@router.get("")
async def list_grievances(
    status_filter: str | None = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """List grievances visible to the caller, newest first."""
    scope = list_scope(identity, ResourceType.GRIEVANCE)

    query = select(Grievance).order_by(Grievance.created_at.desc())
    if not scope.unrestricted:
        query = query.where(Grievance.user_id == UUID(scope.user_id))
    if status_filter:
        query = query.where(Grievance.status == status_filter)
    query = query.limit(limit).offset(offset)

    result = await db.execute(query)
    return {
        "data": [_serialize(g) for g in result.scalars().all()],
        "pagination": {"limit": limit, "offset": offset},
    }


@router.get("/{grievance_id}")
async def get_grievance(
    grievance_id: UUID,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    grievance = await get_or_404(db, Grievance, grievance_id, ResourceType.GRIEVANCE)
    authorize(identity, ResourceType.GRIEVANCE, grievance_snapshot(grievance), Action.READ)
    return {"data": _serialize(grievance)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_grievance(
    body: GrievanceCreate,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    authorize(identity, ResourceType.GRIEVANCE, draft(identity), Action.CREATE)

    grievance = Grievance(
        user_id=UUID(identity.id),
        title=body.title,
        description=body.description,
        category=body.category,
        status=GrievanceStatus.SUBMITTED.value,
    )
    db.add(grievance)
    await db.commit()
    grievance = await reload(db, Grievance, grievance.id)
    logger.info(
        "Grievance submitted",
        extra={"user_id": identity.id, "resource_id": str(grievance.id)},
    )
    return {"data": _serialize(grievance)}


@router.put("/{grievance_id}")
async def review_grievance(
    grievance_id: UUID,
    body: GrievanceUpdate,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """Admin review: move status and/or record notes."""
    grievance = await get_or_404(db, Grievance, grievance_id, ResourceType.GRIEVANCE)
    snapshot = grievance_snapshot(grievance)
    authorize(identity, ResourceType.GRIEVANCE, snapshot, Action.UPDATE_STATUS)

    notes = {"admin_notes": body.admin_notes} if body.admin_notes else {}
    status_change = body.status is not None and body.status != grievance.status
    if not notes and not status_change:
        raise InvalidInputError("No changes supplied", "NO_CHANGES")

    now = datetime.now(timezone.utc)
    if status_change:
        plan = request_transition(
            identity, ResourceType.GRIEVANCE, snapshot, body.status, now,
        )
        if isinstance(plan, Rejection):
            raise_rejection(
                plan, identity,
                ErrorContext(resource_type="Grievance", resource_id=str(grievance_id)),
                action=Action.UPDATE_STATUS,
            )
        await apply_transition(
            db, ResourceType.GRIEVANCE, grievance.id, plan, now, extra_values=notes,
        )
    else:
        grievance.admin_notes = body.admin_notes
        grievance.updated_at = now

    await db.commit()
    grievance = await reload(db, Grievance, grievance_id)
    return {"data": _serialize(grievance)}
