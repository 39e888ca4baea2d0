"""Status Transition Engine — tests for legal edges, policy ordering and side effects.

Tests cover:
    - Allowed edges per resource type, terminal states
    - Policy is checked before the edge (Forbidden beats invalid transition)
    - Unknown target statuses are input errors
    - resolved_at stamping for grievances and tickets
    - first_reply_escalation only for open tickets
"""

from datetime import datetime, timezone

import pytest

from mutual_aid.core.domain_types import (
    GrievanceStatus, ResourceType, Role, TicketStatus,
)
from mutual_aid.core.identity import Identity
from mutual_aid.core.rejection import ErrorKind, Rejection
from mutual_aid.core.resource import ResourceSnapshot
from mutual_aid.core.transitions import (
    CascadeStatus, SetTimestamp, TransitionResult, first_reply_escalation,
    request_transition,
)

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
OWNER = Identity(id="owner", is_approved=True)
OTHER = Identity(id="other", is_approved=True)
ADMIN = Identity(id="admin", roles=frozenset({Role.ADMIN, Role.USER}), is_approved=True)


def _snap(status, owner="owner", id="r1"):
    return ResourceSnapshot(id=id, owner_id=owner, status=status)


# ─── Help posts ──────────────────────────────────────────────────

@pytest.mark.parametrize("current,target", [
    ("open", "in_progress"),
    ("open", "cancelled"),
    ("in_progress", "completed"),
    ("in_progress", "cancelled"),
])
def test_help_post_allowed_edges(current, target):
    result = request_transition(OWNER, ResourceType.HELP_POST, _snap(current), target, NOW)
    assert result == TransitionResult(applied=target, previous=current)


@pytest.mark.parametrize("current,target", [
    ("open", "completed"),
    ("completed", "open"),
    ("cancelled", "in_progress"),
    ("open", "open"),
])
def test_help_post_forbidden_edges(current, target):
    result = request_transition(OWNER, ResourceType.HELP_POST, _snap(current), target, NOW)
    assert isinstance(result, Rejection)
    assert result.kind == ErrorKind.INVALID_TRANSITION


def test_help_post_transition_by_non_owner_is_forbidden():
    result = request_transition(OTHER, ResourceType.HELP_POST, _snap("open"), "in_progress", NOW)
    assert result.kind == ErrorKind.FORBIDDEN


def test_policy_checked_before_edge():
    # Impossible edge, wrong caller: Forbidden, not InvalidTransition
    result = request_transition(OTHER, ResourceType.HELP_POST, _snap("completed"), "open", NOW)
    assert result.kind == ErrorKind.FORBIDDEN


def test_unknown_status_is_invalid_input():
    result = request_transition(OWNER, ResourceType.HELP_POST, _snap("open"), "archived", NOW)
    assert result.kind == ErrorKind.INVALID_INPUT
    assert result.code == "UNKNOWN_STATUS"
    assert result.field == "status"


def test_unauthenticated_transition_is_rejected():
    result = request_transition(None, ResourceType.HELP_POST, _snap("open"), "cancelled", NOW)
    assert result.kind == ErrorKind.UNAUTHENTICATED


def test_ratings_have_no_status_lifecycle():
    result = request_transition(ADMIN, ResourceType.RATING, _snap(None), "closed", NOW)
    assert isinstance(result, Rejection)
    assert result.kind == ErrorKind.FORBIDDEN


# ─── Grievances ──────────────────────────────────────────────────

def test_grievance_resolution_stamps_resolved_at():
    result = request_transition(
        ADMIN, ResourceType.GRIEVANCE, _snap("under_review"), GrievanceStatus.RESOLVED, NOW,
    )
    assert result.applied == "resolved"
    assert result.side_effects == (SetTimestamp("resolved_at", NOW),)


def test_grievance_review_has_no_side_effects():
    result = request_transition(ADMIN, ResourceType.GRIEVANCE, _snap("submitted"), "under_review", NOW)
    assert result.side_effects == ()


def test_grievance_owner_cannot_transition():
    result = request_transition(OWNER, ResourceType.GRIEVANCE, _snap("submitted"), "closed", NOW)
    assert result.kind == ErrorKind.FORBIDDEN


def test_closed_grievance_is_terminal():
    result = request_transition(ADMIN, ResourceType.GRIEVANCE, _snap("closed"), "under_review", NOW)
    assert result.kind == ErrorKind.INVALID_TRANSITION


def test_grievance_cannot_skip_review_to_resolved():
    result = request_transition(ADMIN, ResourceType.GRIEVANCE, _snap("submitted"), "resolved", NOW)
    assert result.kind == ErrorKind.INVALID_TRANSITION


# ─── Support tickets ─────────────────────────────────────────────

@pytest.mark.parametrize("current,target", [
    ("in_progress", "resolved"),
    ("in_progress", "closed"),
    ("open", "closed"),
    ("resolved", "closed"),
])
def test_ticket_terminal_moves_stamp_resolved_at(current, target):
    result = request_transition(ADMIN, ResourceType.SUPPORT_TICKET, _snap(current), target, NOW)
    assert result.side_effects == (SetTimestamp("resolved_at", NOW),)


def test_ticket_reopen_is_invalid():
    result = request_transition(ADMIN, ResourceType.SUPPORT_TICKET, _snap("closed"), "open", NOW)
    assert result.kind == ErrorKind.INVALID_TRANSITION


def test_ticket_owner_cannot_close():
    result = request_transition(OWNER, ResourceType.SUPPORT_TICKET, _snap("open"), "closed", NOW)
    assert result.kind == ErrorKind.FORBIDDEN


# ─── first_reply_escalation ──────────────────────────────────────

def test_first_reply_escalates_open_ticket():
    effects = first_reply_escalation(_snap("open", id="t1"))
    assert effects == (
        CascadeStatus(
            resource_type=ResourceType.SUPPORT_TICKET,
            resource_id="t1",
            from_status=TicketStatus.OPEN.value,
            to_status=TicketStatus.IN_PROGRESS.value,
        ),
    )


@pytest.mark.parametrize("status", ["in_progress", "resolved", "closed"])
def test_reply_on_non_open_ticket_has_no_effect(status):
    assert first_reply_escalation(_snap(status)) == ()
