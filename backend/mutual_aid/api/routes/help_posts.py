"""Help Posts — CRUD for help requests/offers, with owner-gated writes and status lifecycle.

Invariants:
    - Any authenticated member may read; only approved members may create
    - Only the owner may edit, transition, or delete a post (no admin override)
    - Status changes go through core/transitions.py and are written conditionally
    - A status equal to the current one is treated as "no status change"
    - Non-owners get 403 before NO_CHANGES is considered
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mutual_aid.api.dependencies import get_identity
from mutual_aid.core.domain_types import Action, ResourceType
from mutual_aid.core.errors import ErrorContext, InvalidInputError
from mutual_aid.core.identity import Identity
from mutual_aid.core.rejection import Rejection
from mutual_aid.core.transitions import request_transition
from mutual_aid.infrastructure.database import get_db
from mutual_aid.models.help_post import HelpPost
from mutual_aid.schemas.help_post import HelpPostCreate, HelpPostUpdate
from mutual_aid.services.access_guard import authorize, raise_rejection
from mutual_aid.services.apply_transition import apply_transition
from mutual_aid.services.rows import get_or_404, reload
from mutual_aid.services.snapshots import draft, help_post_snapshot

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/help-posts", tags=["help-posts"])


def serialize_help_post(post: HelpPost, distance_km: float | None = None) -> dict:
    data = {
        "id": str(post.id),
        "user_id": str(post.user_id),
        "type": post.type,
        "title": post.title,
        "description": post.description,
        "category": post.category,
        "status": post.status,
        "latitude": post.latitude,
        "longitude": post.longitude,
        "created_at": post.created_at.isoformat(),
        "updated_at": post.updated_at.isoformat(),
        "profiles": (
            {"full_name": post.author.full_name, "avatar_url": post.author.avatar_url}
            if post.author is not None else None
        ),
    }
    if distance_km is not None:
        data["distance_km"] = distance_km
    return data


@router.get("")
async def list_help_posts(
    type_filter: str | None = Query(None, alias="type"),
    status_filter: str | None = Query(None, alias="status"),
    category: str | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """List help posts, newest first."""
    authorize(identity, ResourceType.HELP_POST, None, Action.READ)

    query = select(HelpPost).order_by(HelpPost.created_at.desc())
    if type_filter:
        query = query.where(HelpPost.type == type_filter)
    if status_filter:
        query = query.where(HelpPost.status == status_filter)
    if category:
        query = query.where(HelpPost.category == category)
    query = query.limit(limit).offset(offset)

    result = await db.execute(query)
    posts = result.scalars().all()
    return {
        "data": [serialize_help_post(p) for p in posts],
        "pagination": {"limit": limit, "offset": offset},
    }


@router.get("/{post_id}")
async def get_help_post(
    post_id: UUID,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    post = await get_or_404(db, HelpPost, post_id, ResourceType.HELP_POST)
    authorize(identity, ResourceType.HELP_POST, help_post_snapshot(post), Action.READ)
    return {"data": serialize_help_post(post)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_help_post(
    body: HelpPostCreate,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """Create a help post. Only approved members may post."""
    authorize(identity, ResourceType.HELP_POST, draft(identity), Action.CREATE)

    post = HelpPost(
        user_id=UUID(identity.id),
        type=body.type,
        title=body.title,
        description=body.description,
        category=body.category,
        latitude=body.latitude,
        longitude=body.longitude,
        status="open",
    )
    db.add(post)
    await db.commit()
    post = await reload(db, HelpPost, post.id)
    logger.info(
        "Help post created",
        extra={"user_id": identity.id, "resource_id": str(post.id)},
    )
    return {"data": serialize_help_post(post)}


@router.put("/{post_id}")
async def update_help_post(
    post_id: UUID,
    body: HelpPostUpdate,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """Edit content and/or move the post along its status lifecycle."""
    post = await get_or_404(db, HelpPost, post_id, ResourceType.HELP_POST)
    snapshot = help_post_snapshot(post)
    content = body.content_updates()
    status_change = body.status is not None and body.status != post.status

    if content or not status_change:
        authorize(identity, ResourceType.HELP_POST, snapshot, Action.UPDATE_OWN_FIELDS)
    if not content and not status_change:
        raise InvalidInputError("No changes supplied", "NO_CHANGES")

    now = datetime.now(timezone.utc)
    if status_change:
        plan = request_transition(
            identity, ResourceType.HELP_POST, snapshot, body.status, now,
        )
        if isinstance(plan, Rejection):
            raise_rejection(
                plan, identity,
                ErrorContext(resource_type="HelpPost", resource_id=str(post_id)),
                action=Action.UPDATE_STATUS,
            )
        await apply_transition(
            db, ResourceType.HELP_POST, post.id, plan, now, extra_values=content,
        )
    else:
        for name, value in content.items():
            setattr(post, name, value)
        post.updated_at = now

    await db.commit()
    post = await reload(db, HelpPost, post_id)
    return {"data": serialize_help_post(post)}


@router.delete("/{post_id}")
async def delete_help_post(
    post_id: UUID,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    post = await get_or_404(db, HelpPost, post_id, ResourceType.HELP_POST)
    authorize(identity, ResourceType.HELP_POST, help_post_snapshot(post), Action.DELETE)
    await db.delete(post)
    await db.commit()
    logger.info(
        "Help post deleted",
        extra={"user_id": identity.id, "resource_id": str(post_id)},
    )
    return {"success": True}
