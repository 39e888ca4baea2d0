"""Transition Application — writes a planned transition with a compare-and-swap on status.

Invariants:
    - The owning update is conditional on the status the plan was computed from;
      zero affected rows raises ConflictError (a concurrent writer won)
    - SetTimestamp effects are written in the same UPDATE as the status
    - CascadeStatus effects are conditional too, but a miss is not an error:
      the target already left from_status (e.g. another reply escalated the ticket)
    - Nothing here commits; the route commits once, after all writes

Design Decisions:
    - Core-level UPDATE ... WHERE status = :previous instead of SELECT FOR UPDATE:
      one round trip, works the same on PostgreSQL and SQLite
"""

import logging
from datetime import datetime
from typing import Any, Iterable
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from mutual_aid.core.domain_types import ResourceType
from mutual_aid.core.errors import ConflictError, ErrorContext
from mutual_aid.core.transitions import (
    CascadeStatus, SetTimestamp, SideEffect, TransitionResult,
)
from mutual_aid.models.grievance import Grievance
from mutual_aid.models.help_post import HelpPost
from mutual_aid.models.support_ticket import SupportTicket

logger = logging.getLogger(__name__)

_STATUS_MODELS: dict[ResourceType, type] = {
    ResourceType.HELP_POST: HelpPost,
    ResourceType.GRIEVANCE: Grievance,
    ResourceType.SUPPORT_TICKET: SupportTicket,
}


async def apply_transition(
    db: AsyncSession,
    resource_type: ResourceType,
    resource_id: UUID,
    result: TransitionResult,
    now: datetime,
    extra_values: dict[str, Any] | None = None,
) -> None:
    """Write result.applied (plus timestamps and extra_values) if status is unchanged."""
    model = _STATUS_MODELS[resource_type]
    values: dict[str, Any] = {
        **(extra_values or {}),
        "status": result.applied,
        "updated_at": now,
    }
    cascades: list[CascadeStatus] = []
    for effect in result.side_effects:
        if isinstance(effect, SetTimestamp):
            values[effect.field] = effect.at
        else:
            cascades.append(effect)

    outcome = await db.execute(
        update(model)
        .where(model.id == resource_id, model.status == result.previous)
        .values(**values),
    )
    if outcome.rowcount == 0:
        raise ConflictError(
            f"Status changed concurrently; expected '{result.previous}'",
            ErrorContext(
                resource_type=model.__name__, resource_id=str(resource_id),
            ),
        )
    logger.info(
        f"{model.__name__} status {result.previous} -> {result.applied}",
        extra={
            "resource_type": resource_type.value,
            "resource_id": str(resource_id),
            "status_from": result.previous,
            "status_to": result.applied,
        },
    )
    await apply_cascades(db, cascades, now)


async def apply_cascades(
    db: AsyncSession, effects: Iterable[SideEffect], now: datetime,
) -> int:
    """Apply system-triggered status moves. Returns how many rows actually moved."""
    moved = 0
    for effect in effects:
        if not isinstance(effect, CascadeStatus):
            continue
        model = _STATUS_MODELS[effect.resource_type]
        outcome = await db.execute(
            update(model)
            .where(
                model.id == UUID(effect.resource_id),
                model.status == effect.from_status,
            )
            .values(status=effect.to_status, updated_at=now),
        )
        if outcome.rowcount:
            moved += outcome.rowcount
            logger.info(
                f"{model.__name__} auto-moved {effect.from_status} -> {effect.to_status}",
                extra={
                    "resource_type": effect.resource_type.value,
                    "resource_id": effect.resource_id,
                    "status_from": effect.from_status,
                    "status_to": effect.to_status,
                },
            )
    return moved
