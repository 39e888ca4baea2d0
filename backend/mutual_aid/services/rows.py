"""Row Loading — primary-key lookups with 404 mapping, and post-write reloads.

Invariants:
    - get_or_404 raises ResourceNotFoundError, never returns None
    - reload re-populates an identity-mapped row (and its eager relationships)
      after a bulk UPDATE or commit, so responses never trigger async lazy loads
"""

from typing import TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mutual_aid.core.domain_types import ResourceType
from mutual_aid.core.errors import ResourceNotFoundError

T = TypeVar("T")

# Human-facing names used in error messages and log context
RESOURCE_LABELS = {
    ResourceType.HELP_POST: "HelpPost",
    ResourceType.GRIEVANCE: "Grievance",
    ResourceType.SUPPORT_TICKET: "SupportTicket",
    ResourceType.TICKET_MESSAGE: "TicketMessage",
    ResourceType.RATING: "Rating",
    ResourceType.PROFILE: "Profile",
}


async def get_or_404(
    db: AsyncSession, model: type[T], resource_id: UUID, resource_type: ResourceType,
) -> T:
    """Load a row by primary key or raise ResourceNotFoundError."""
    row = await db.get(model, resource_id)
    if row is None:
        raise ResourceNotFoundError(RESOURCE_LABELS[resource_type], str(resource_id))
    return row


async def reload(db: AsyncSession, model: type[T], resource_id: UUID) -> T:
    result = await db.execute(
        select(model)
        .where(model.id == resource_id)
        .execution_options(populate_existing=True),
    )
    return result.scalar_one()
