"""Ratings — members rate each other after an exchange.

Invariants:
    - Reading a member's ratings needs no credentials
    - Self-rating, out-of-range values and a missing rated user are 400s decided by the policy
    - The rated member and, when given, the help post must exist (404)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mutual_aid.api.dependencies import get_identity, get_optional_identity
from mutual_aid.core.domain_types import Action, ResourceType
from mutual_aid.core.errors import InvalidInputError
from mutual_aid.core.identity import Identity
from mutual_aid.core.rating_summary import summarize_ratings
from mutual_aid.infrastructure.database import get_db
from mutual_aid.models.help_post import HelpPost
from mutual_aid.models.profile import Profile
from mutual_aid.models.rating import Rating
from mutual_aid.schemas.rating import RatingCreate
from mutual_aid.services.access_guard import authorize
from mutual_aid.services.rows import get_or_404, reload
from mutual_aid.services.snapshots import rating_draft

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/ratings", tags=["ratings"])


def _serialize(rating: Rating) -> dict:
    return {
        "id": str(rating.id),
        "rater_id": str(rating.rater_id),
        "rated_user_id": str(rating.rated_user_id),
        "help_post_id": str(rating.help_post_id) if rating.help_post_id else None,
        "rating": rating.rating,
        "comment": rating.comment,
        "created_at": rating.created_at.isoformat(),
        "rater": (
            {"full_name": rating.rater.full_name, "avatar_url": rating.rater.avatar_url}
            if rating.rater is not None else None
        ),
        "help_post": (
            {"title": rating.help_post.title} if rating.help_post is not None else None
        ),
    }


@router.get("")
async def list_ratings(
    user_id: UUID | None = Query(None),
    identity: Identity | None = Depends(get_optional_identity),
    db: AsyncSession = Depends(get_db),
):
    """Ratings received by user_id, newest first, with their summary."""
    authorize(identity, ResourceType.RATING, None, Action.READ)
    if user_id is None:
        raise InvalidInputError("user_id is required", "USER_ID_REQUIRED", field="user_id")

    result = await db.execute(
        select(Rating)
        .where(Rating.rated_user_id == user_id)
        .order_by(Rating.created_at.desc()),
    )
    ratings = result.scalars().all()
    summary = summarize_ratings([r.rating for r in ratings])
    return {
        "data": [_serialize(r) for r in ratings],
        "average_rating": summary.average_rating,
        "total_ratings": summary.total_ratings,
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_rating(
    body: RatingCreate,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    authorize(
        identity, ResourceType.RATING,
        rating_draft(identity, body.rated_user_id, body.rating), Action.CREATE,
    )
    await get_or_404(db, Profile, body.rated_user_id, ResourceType.PROFILE)
    if body.help_post_id is not None:
        await get_or_404(db, HelpPost, body.help_post_id, ResourceType.HELP_POST)

    rating = Rating(
        rater_id=UUID(identity.id),
        rated_user_id=body.rated_user_id,
        help_post_id=body.help_post_id,
        rating=body.rating,
        comment=body.comment,
    )
    db.add(rating)
    await db.commit()
    rating = await reload(db, Rating, rating.id)

    logger.info(
        f"Rating submitted ({rating.rating})",
        extra={"user_id": identity.id, "resource_id": str(rating.id)},
    )
    return {"data": _serialize(rating)}
