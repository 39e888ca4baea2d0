"""Support Tickets — member requests, admin triage (status, priority, assignment).

Invariants:
    - Visible to the owner, the assignee and admins; lists are pre-filtered the same way
    - Opening a ticket also records its body as the first thread message
    - The embedded thread drops messages the reader may not see (internal notes
      for non-admins)
    - status, priority and assigned_to are admin-only; status moves are CAS-written
    - Assigning to an unknown profile is a 404, not a dangling FK
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from mutual_aid.api.dependencies import get_identity
from mutual_aid.core.access_policy import Relation, evaluate, list_scope
from mutual_aid.core.domain_types import Action, ResourceType, TicketStatus
from mutual_aid.core.errors import ErrorContext, InvalidInputError
from mutual_aid.core.identity import Identity
from mutual_aid.core.rejection import Rejection
from mutual_aid.core.transitions import request_transition
from mutual_aid.infrastructure.database import get_db
from mutual_aid.models.profile import Profile
from mutual_aid.models.support_ticket import SupportTicket
from mutual_aid.models.ticket_message import TicketMessage
from mutual_aid.schemas.support_ticket import TicketCreate, TicketUpdate
from mutual_aid.services.access_guard import authorize, raise_rejection
from mutual_aid.services.apply_transition import apply_transition
from mutual_aid.services.rows import get_or_404, reload
from mutual_aid.services.snapshots import draft, message_snapshot, ticket_snapshot

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/support-tickets", tags=["support-tickets"])

_RELATION_COLUMNS = {
    Relation.OWNER: SupportTicket.user_id,
    Relation.ASSIGNEE: SupportTicket.assigned_to,
}


def _ts(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def serialize_ticket(ticket: SupportTicket) -> dict:
    return {
        "id": str(ticket.id),
        "user_id": str(ticket.user_id),
        "assigned_to": str(ticket.assigned_to) if ticket.assigned_to else None,
        "subject": ticket.subject,
        "message": ticket.message,
        "priority": ticket.priority,
        "status": ticket.status,
        "resolved_at": _ts(ticket.resolved_at),
        "created_at": _ts(ticket.created_at),
        "updated_at": _ts(ticket.updated_at),
    }


def serialize_message(message: TicketMessage) -> dict:
    return {
        "id": str(message.id),
        "ticket_id": str(message.ticket_id),
        "user_id": str(message.user_id),
        "message": message.message,
        "is_internal": message.is_internal,
        "created_at": _ts(message.created_at),
    }


@router.get("")
async def list_tickets(
    status_filter: str | None = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """List tickets the caller owns or is assigned to (all, for admins)."""
    scope = list_scope(identity, ResourceType.SUPPORT_TICKET)

    query = select(SupportTicket).order_by(SupportTicket.created_at.desc())
    if not scope.unrestricted:
        me = UUID(scope.user_id)
        query = query.where(
            or_(*(_RELATION_COLUMNS[r] == me for r in scope.relations)),
        )
    if status_filter:
        query = query.where(SupportTicket.status == status_filter)
    query = query.limit(limit).offset(offset)

    result = await db.execute(query)
    return {
        "data": [serialize_ticket(t) for t in result.scalars().all()],
        "pagination": {"limit": limit, "offset": offset},
    }


@router.get("/{ticket_id}")
async def get_ticket(
    ticket_id: UUID,
    include_messages: bool = Query(False),
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    ticket = await get_or_404(db, SupportTicket, ticket_id, ResourceType.SUPPORT_TICKET)
    authorize(identity, ResourceType.SUPPORT_TICKET, ticket_snapshot(ticket), Action.READ)

    data = serialize_ticket(ticket)
    if include_messages:
        result = await db.execute(
            select(TicketMessage)
            .where(TicketMessage.ticket_id == ticket.id)
            .order_by(TicketMessage.created_at.asc()),
        )
        data["messages"] = [
            serialize_message(m) for m in result.scalars().all()
            if evaluate(
                identity, ResourceType.TICKET_MESSAGE,
                message_snapshot(m, ticket), Action.READ,
            ).allowed
        ]
    return {"data": data}


@router.post("", status_code=status.HTTP_201_CREATED)
async def open_ticket(
    body: TicketCreate,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    authorize(identity, ResourceType.SUPPORT_TICKET, draft(identity), Action.CREATE)

    ticket = SupportTicket(
        user_id=UUID(identity.id),
        subject=body.subject,
        message=body.message,
        priority=body.priority,
        status=TicketStatus.OPEN.value,
    )
    db.add(ticket)
    await db.flush()
    db.add(TicketMessage(
        ticket_id=ticket.id, user_id=ticket.user_id, message=body.message,
    ))
    await db.commit()
    ticket = await reload(db, SupportTicket, ticket.id)

    logger.info(
        f"Ticket opened (priority={ticket.priority})",
        extra={"user_id": identity.id, "resource_id": str(ticket.id)},
    )
    return {"data": serialize_ticket(ticket)}


@router.put("/{ticket_id}")
async def triage_ticket(
    ticket_id: UUID,
    body: TicketUpdate,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    """Admin triage. Any combination of status, priority and assigned_to."""
    ticket = await get_or_404(db, SupportTicket, ticket_id, ResourceType.SUPPORT_TICKET)
    snapshot = ticket_snapshot(ticket)

    changes: dict = {}
    if body.priority is not None and body.priority != ticket.priority:
        authorize(identity, ResourceType.SUPPORT_TICKET, snapshot, Action.UPDATE_STATUS)
        changes["priority"] = body.priority
    if body.assignment_requested and body.assigned_to != ticket.assigned_to:
        authorize(identity, ResourceType.SUPPORT_TICKET, snapshot, Action.ASSIGN)
        if body.assigned_to is not None:
            await get_or_404(db, Profile, body.assigned_to, ResourceType.PROFILE)
        changes["assigned_to"] = body.assigned_to

    status_change = body.status is not None and body.status != ticket.status
    if not changes and not status_change:
        # Non-admins get 403 ahead of NO_CHANGES
        authorize(identity, ResourceType.SUPPORT_TICKET, snapshot, Action.UPDATE_STATUS)
        raise InvalidInputError("No changes supplied", "NO_CHANGES")

    now = datetime.now(timezone.utc)
    if status_change:
        plan = request_transition(
            identity, ResourceType.SUPPORT_TICKET, snapshot, body.status, now,
        )
        if isinstance(plan, Rejection):
            raise_rejection(
                plan, identity,
                ErrorContext(resource_type="SupportTicket", resource_id=str(ticket_id)),
                action=Action.UPDATE_STATUS,
            )
        await apply_transition(
            db, ResourceType.SUPPORT_TICKET, ticket.id, plan, now, extra_values=changes,
        )
    else:
        for name, value in changes.items():
            setattr(ticket, name, value)
        ticket.updated_at = now

    await db.commit()
    ticket = await reload(db, SupportTicket, ticket_id)
    logger.info(
        "Ticket triaged",
        extra={"user_id": identity.id, "resource_id": str(ticket_id)},
    )
    return {"data": serialize_ticket(ticket)}
