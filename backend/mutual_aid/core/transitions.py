"""Status Transition Engine — legal status edges per resource type and their side effects.

Invariants:
    - request_transition is PURE: it plans, never applies; the shell writes the plan
      with a conditional update on the current status
    - Policy is checked before the edge: a caller without UPDATE_STATUS rights gets
      Forbidden even for an impossible edge
    - Terminal states (HelpPost completed/cancelled, Grievance closed,
      SupportTicket closed) have no outgoing edges
    - A target equal to the current status is not an edge
    - Entering Grievance resolved, or SupportTicket resolved/closed, always emits
      SetTimestamp("resolved_at")
    - First-reply escalation (open ticket -> in_progress) is system-triggered and
      bypasses the admin-only status rule

Design Decisions:
    - Side effects as returned instructions, not in-line mutation: unit-testable
      without storage, atomically applicable alongside the owning update
    - `now` is an argument: the engine never reads the clock
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from mutual_aid.core.access_policy import evaluate
from mutual_aid.core.domain_types import (
    Action, ResourceType, HelpPostStatus, GrievanceStatus, TicketStatus,
)
from mutual_aid.core.identity import Identity
from mutual_aid.core.rejection import ErrorKind, Rejection, invalid_input
from mutual_aid.core.resource import ResourceSnapshot


# --- Side effects -------------------------------------------------------------

@dataclass(frozen=True)
class SetTimestamp:
    """Set a timestamp column on the transitioned row."""
    field: str
    at: datetime


@dataclass(frozen=True)
class CascadeStatus:
    """Move another record from from_status to to_status (conditional on from_status)."""
    resource_type: ResourceType
    resource_id: str
    from_status: str
    to_status: str


SideEffect = SetTimestamp | CascadeStatus


@dataclass(frozen=True)
class TransitionResult:
    applied: str
    previous: str
    side_effects: tuple[SideEffect, ...] = ()


# --- State machines -----------------------------------------------------------

@dataclass(frozen=True)
class StateMachine:
    statuses: type[Enum]
    edges: dict[str, frozenset[str]]
    # target status -> timestamp columns stamped when entering it
    stamps: dict[str, tuple[str, ...]] = field(default_factory=dict)

    def targets(self, current: str | None) -> frozenset[str]:
        return self.edges.get(current, frozenset()) if current else frozenset()


def _edges(pairs: dict[Enum, tuple[Enum, ...]]) -> dict[str, frozenset[str]]:
    return {src.value: frozenset(dst.value for dst in dsts) for src, dsts in pairs.items()}


HELP_POST_MACHINE = StateMachine(
    statuses=HelpPostStatus,
    edges=_edges({
        HelpPostStatus.OPEN: (HelpPostStatus.IN_PROGRESS, HelpPostStatus.CANCELLED),
        HelpPostStatus.IN_PROGRESS: (HelpPostStatus.COMPLETED, HelpPostStatus.CANCELLED),
        HelpPostStatus.COMPLETED: (),
        HelpPostStatus.CANCELLED: (),
    }),
)

GRIEVANCE_MACHINE = StateMachine(
    statuses=GrievanceStatus,
    edges=_edges({
        GrievanceStatus.SUBMITTED: (GrievanceStatus.UNDER_REVIEW, GrievanceStatus.CLOSED),
        GrievanceStatus.UNDER_REVIEW: (GrievanceStatus.RESOLVED, GrievanceStatus.CLOSED),
        GrievanceStatus.RESOLVED: (GrievanceStatus.CLOSED,),
        GrievanceStatus.CLOSED: (),
    }),
    stamps={GrievanceStatus.RESOLVED.value: ("resolved_at",)},
)

TICKET_MACHINE = StateMachine(
    statuses=TicketStatus,
    edges=_edges({
        TicketStatus.OPEN: (TicketStatus.IN_PROGRESS, TicketStatus.CLOSED),
        TicketStatus.IN_PROGRESS: (TicketStatus.RESOLVED, TicketStatus.CLOSED),
        TicketStatus.RESOLVED: (TicketStatus.CLOSED,),
        TicketStatus.CLOSED: (),
    }),
    stamps={
        TicketStatus.RESOLVED.value: ("resolved_at",),
        TicketStatus.CLOSED.value: ("resolved_at",),
    },
)

MACHINES: dict[ResourceType, StateMachine] = {
    ResourceType.HELP_POST: HELP_POST_MACHINE,
    ResourceType.GRIEVANCE: GRIEVANCE_MACHINE,
    ResourceType.SUPPORT_TICKET: TICKET_MACHINE,
}


# --- Engine -------------------------------------------------------------------

def request_transition(
    identity: Identity | None,
    resource_type: ResourceType,
    resource: ResourceSnapshot,
    target: str | Enum,
    now: datetime,
) -> TransitionResult | Rejection:
    """Plan an actor-requested status change, or reject it."""
    decision = evaluate(identity, resource_type, resource, Action.UPDATE_STATUS)
    rejection = decision.to_rejection()
    if rejection is not None:
        return rejection

    machine = MACHINES.get(resource_type)
    if machine is None:
        return Rejection(
            ErrorKind.FORBIDDEN, "NO_STATUS_LIFECYCLE",
            f"{resource_type.value} has no status lifecycle",
        )

    target = _status_value(target)
    if target not in {s.value for s in machine.statuses}:
        allowed = ", ".join(s.value for s in machine.statuses)
        return invalid_input(
            "UNKNOWN_STATUS",
            f"Unknown {resource_type.value} status '{target}'. Expected one of: {allowed}",
            field="status",
        )

    current = resource.status
    if target not in machine.targets(current):
        return Rejection(
            ErrorKind.INVALID_TRANSITION, "INVALID_TRANSITION",
            f"Cannot move {resource_type.value} from '{current}' to '{target}'",
        )

    effects = tuple(SetTimestamp(name, now) for name in machine.stamps.get(target, ()))
    return TransitionResult(applied=target, previous=current, side_effects=effects)


def first_reply_escalation(ticket: ResourceSnapshot) -> tuple[SideEffect, ...]:
    """Side effects of posting a message on a ticket: open tickets move to in_progress.

    System-triggered, so no policy check; the caller has already been admitted
    to post the message.
    """
    if ticket.id is None or ticket.status != TicketStatus.OPEN.value:
        return ()
    return (
        CascadeStatus(
            resource_type=ResourceType.SUPPORT_TICKET,
            resource_id=ticket.id,
            from_status=TicketStatus.OPEN.value,
            to_status=TicketStatus.IN_PROGRESS.value,
        ),
    )


def _status_value(status: str | Enum) -> str:
    return status.value if isinstance(status, Enum) else status
