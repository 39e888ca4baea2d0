"""Ticket Messages — replies on a support ticket thread.

Invariants:
    - The parent ticket must exist (404) and the caller must be a participant (403)
    - Only admins may post internal notes (403)
    - The first reply on an open ticket moves it to in_progress, conditionally:
      concurrent first replies escalate it exactly once
    - Message insert and escalation commit together
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from mutual_aid.api.dependencies import get_identity
from mutual_aid.api.routes.support_tickets import serialize_message
from mutual_aid.core.domain_types import Action, ResourceType
from mutual_aid.core.errors import ErrorContext
from mutual_aid.core.identity import Identity
from mutual_aid.core.transitions import first_reply_escalation
from mutual_aid.infrastructure.database import get_db
from mutual_aid.models.support_ticket import SupportTicket
from mutual_aid.models.ticket_message import TicketMessage
from mutual_aid.schemas.support_ticket import TicketMessageCreate
from mutual_aid.services.access_guard import authorize
from mutual_aid.services.apply_transition import apply_cascades
from mutual_aid.services.snapshots import message_draft, ticket_snapshot

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/ticket-messages", tags=["ticket-messages"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def post_message(
    body: TicketMessageCreate,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
):
    ticket = await db.get(SupportTicket, body.ticket_id)
    authorize(
        identity, ResourceType.TICKET_MESSAGE,
        message_draft(identity, ticket, body.is_internal), Action.CREATE,
        ErrorContext(resource_type="SupportTicket", resource_id=str(body.ticket_id)),
    )

    message = TicketMessage(
        ticket_id=ticket.id,
        user_id=UUID(identity.id),
        message=body.message,
        is_internal=body.is_internal,
    )
    db.add(message)
    await db.flush()

    now = datetime.now(timezone.utc)
    escalated = await apply_cascades(db, first_reply_escalation(ticket_snapshot(ticket)), now)
    await db.commit()

    logger.info(
        "Ticket message posted",
        extra={
            "user_id": identity.id,
            "resource_type": ResourceType.TICKET_MESSAGE.value,
            "resource_id": str(message.id),
        },
    )
    data = serialize_message(message)
    data["ticket_escalated"] = bool(escalated)
    return {"data": data}
