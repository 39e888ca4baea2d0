"""Snapshots — ORM rows (or create payloads) -> core ResourceSnapshot.

Invariants:
    - Every id in a snapshot is a str, matching Identity.id
    - Drafts (create actions) carry the caller as owner and no id
"""

from typing import Any
from uuid import UUID

from mutual_aid.core.identity import Identity
from mutual_aid.core.resource import ResourceSnapshot
from mutual_aid.models.grievance import Grievance
from mutual_aid.models.help_post import HelpPost
from mutual_aid.models.profile import Profile
from mutual_aid.models.support_ticket import SupportTicket
from mutual_aid.models.ticket_message import TicketMessage


def _str(value: UUID | None) -> str | None:
    return str(value) if value is not None else None


def help_post_snapshot(post: HelpPost) -> ResourceSnapshot:
    return ResourceSnapshot(
        id=str(post.id), owner_id=str(post.user_id), status=post.status,
    )


def grievance_snapshot(grievance: Grievance) -> ResourceSnapshot:
    return ResourceSnapshot(
        id=str(grievance.id), owner_id=str(grievance.user_id),
        status=grievance.status,
    )


def ticket_snapshot(ticket: SupportTicket) -> ResourceSnapshot:
    return ResourceSnapshot(
        id=str(ticket.id), owner_id=str(ticket.user_id),
        status=ticket.status, assignee_id=_str(ticket.assigned_to),
    )


def message_draft(
    identity: Identity, ticket: SupportTicket | None, is_internal: bool = False,
) -> ResourceSnapshot:
    return ResourceSnapshot(
        id=None, owner_id=identity.id,
        parent=ticket_snapshot(ticket) if ticket is not None else None,
        fields={"is_internal": is_internal},
    )


def message_snapshot(message: TicketMessage, ticket: SupportTicket) -> ResourceSnapshot:
    return ResourceSnapshot(
        id=str(message.id), owner_id=str(message.user_id),
        parent=ticket_snapshot(ticket),
        fields={"is_internal": message.is_internal},
    )


def rating_draft(
    identity: Identity, rated_user_id: UUID, rating: Any,
) -> ResourceSnapshot:
    return ResourceSnapshot(
        id=None, owner_id=identity.id,
        fields={"rated_user_id": str(rated_user_id), "rating": rating},
    )


def profile_snapshot(profile: Profile) -> ResourceSnapshot:
    return ResourceSnapshot(
        id=str(profile.id), owner_id=str(profile.id), status=profile.status,
    )


def draft(identity: Identity) -> ResourceSnapshot:
    """Generic create-draft owned by the caller."""
    return ResourceSnapshot(id=None, owner_id=identity.id)
