"""Nearby Help — open help posts within a radius of a point, nearest first.

Invariants:
    - latitude/longitude are required; "0" is a valid coordinate, only absent or
      unparseable values are rejected (400)
    - type/category narrow the storage query before any distance is computed
    - Only open posts with both coordinates set are candidates
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mutual_aid.api.dependencies import get_identity
from mutual_aid.api.routes.help_posts import serialize_help_post
from mutual_aid.config import get_settings
from mutual_aid.core.domain_types import Action, HelpPostStatus, ResourceType
from mutual_aid.core.errors import ErrorContext
from mutual_aid.core.geo import to_geo_point
from mutual_aid.core.identity import Identity
from mutual_aid.core.proximity import find_nearby, parse_nearby_query
from mutual_aid.core.rejection import Rejection
from mutual_aid.infrastructure.database import get_db
from mutual_aid.models.help_post import HelpPost
from mutual_aid.services.access_guard import authorize, raise_rejection

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/nearby-help", tags=["nearby-help"])


@router.get("")
async def nearby_help(
    latitude: str | None = Query(None),
    longitude: str | None = Query(None),
    radius_km: str | None = Query(None),
    radius: str | None = Query(None),
    type_filter: str | None = Query(None, alias="type"),
    category: str | None = Query(None),
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """Find open help posts near a point."""
    authorize(identity, ResourceType.HELP_POST, None, Action.READ)

    settings = get_settings()
    search = parse_nearby_query(
        latitude, longitude,
        radius_km if radius_km is not None else radius,
        default_radius_km=settings.default_search_radius_km,
        max_radius_km=settings.max_search_radius_km,
    )
    if isinstance(search, Rejection):
        raise_rejection(search, identity, ErrorContext(field=search.field))

    query = select(HelpPost).where(
        HelpPost.status == HelpPostStatus.OPEN.value,
        HelpPost.latitude.is_not(None),
        HelpPost.longitude.is_not(None),
    )
    if type_filter:
        query = query.where(HelpPost.type == type_filter)
    if category:
        query = query.where(HelpPost.category == category)

    result = await db.execute(query)
    posts = {str(p.id): p for p in result.scalars().all()}

    matches = find_nearby(
        search.origin,
        search.radius_km,
        [(post_id, to_geo_point(p.latitude, p.longitude)) for post_id, p in posts.items()],
    )
    logger.info(
        f"Found {len(matches)} help posts within {search.radius_km}km",
        extra={"user_id": identity.id, "result_count": len(matches)},
    )
    return {
        "data": [
            serialize_help_post(posts[m.resource_id], distance_km=m.distance_km)
            for m in matches
        ],
        "count": len(matches),
        "search_params": {
            "latitude": search.origin.latitude,
            "longitude": search.origin.longitude,
            "radius_km": search.radius_km,
        },
    }
