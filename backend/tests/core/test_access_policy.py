"""Resource Access Policy — tests for the deny-by-default rule table.

Tests cover:
    - Unauthenticated callers are denied everything except public rating reads
    - Help posts: any member reads, approved members create, owner-only writes
      (admins get no override)
    - Grievances and profiles: owner or admin reads, admin-only status
    - Support tickets: participants read, admin-only status and assignment
    - Ticket messages: participants of the parent ticket; missing parent is not-found;
      internal notes are admin-only
    - Ratings: self-rating and out-of-range values are input errors
    - Missing rules are denied (deny by default)
    - list_scope pre-filters for non-admins
"""

import pytest

from mutual_aid.core.access_policy import (
    DecisionReason, ListScope, Relation, evaluate, list_scope,
)
from mutual_aid.core.domain_types import Action, ResourceType, Role
from mutual_aid.core.identity import Identity
from mutual_aid.core.rejection import ErrorKind
from mutual_aid.core.resource import ResourceSnapshot

OWNER = Identity(id="owner", is_approved=True)
OTHER = Identity(id="other", is_approved=True)
PENDING = Identity(id="pending", is_approved=False)
ADMIN = Identity(id="admin", roles=frozenset({Role.ADMIN, Role.USER}), is_approved=True)
ASSIGNEE = Identity(id="assignee")


def _post(owner="owner", status="open"):
    return ResourceSnapshot(id="p1", owner_id=owner, status=status)


def _ticket(owner="owner", assignee=None, status="open"):
    return ResourceSnapshot(id="t1", owner_id=owner, assignee_id=assignee, status=status)


def _rating(rater="owner", rated="other", value=4):
    fields = {"rated_user_id": rated, "rating": value}
    return ResourceSnapshot(id=None, owner_id=rater, fields=fields)


# ─── Unauthenticated ─────────────────────────────────────────────

@pytest.mark.parametrize("resource_type,action", [
    (ResourceType.HELP_POST, Action.READ),
    (ResourceType.HELP_POST, Action.CREATE),
    (ResourceType.GRIEVANCE, Action.CREATE),
    (ResourceType.SUPPORT_TICKET, Action.READ),
    (ResourceType.RATING, Action.CREATE),
])
def test_unauthenticated_is_denied(resource_type, action):
    decision = evaluate(None, resource_type, _post(), action)
    assert not decision.allowed
    assert decision.error_kind == ErrorKind.UNAUTHENTICATED


def test_rating_read_is_public():
    decision = evaluate(None, ResourceType.RATING, None, Action.READ)
    assert decision.allowed
    assert decision.reason == DecisionReason.PUBLIC


# ─── Help posts ──────────────────────────────────────────────────

def test_any_member_reads_help_posts():
    assert evaluate(PENDING, ResourceType.HELP_POST, _post(), Action.READ).allowed


def test_only_approved_members_create_help_posts():
    assert evaluate(OWNER, ResourceType.HELP_POST, None, Action.CREATE).allowed
    denied = evaluate(PENDING, ResourceType.HELP_POST, None, Action.CREATE)
    assert denied.reason == DecisionReason.NOT_APPROVED
    assert denied.error_kind == ErrorKind.FORBIDDEN


def test_unapproved_admin_cannot_create_help_posts():
    admin = Identity(id="a", roles=frozenset({Role.ADMIN, Role.USER}), is_approved=False)
    assert not evaluate(admin, ResourceType.HELP_POST, None, Action.CREATE).allowed


@pytest.mark.parametrize("action", [
    Action.UPDATE_OWN_FIELDS, Action.UPDATE_STATUS, Action.DELETE,
])
def test_help_post_writes_are_owner_only(action):
    assert evaluate(OWNER, ResourceType.HELP_POST, _post(), action).allowed
    assert evaluate(OTHER, ResourceType.HELP_POST, _post(), action).reason == DecisionReason.NOT_OWNER
    assert not evaluate(ADMIN, ResourceType.HELP_POST, _post(), action).allowed


def test_help_posts_cannot_be_assigned():
    decision = evaluate(OWNER, ResourceType.HELP_POST, _post(), Action.ASSIGN)
    assert decision.reason == DecisionReason.ACTION_NOT_SUPPORTED


# ─── Grievances & profiles ───────────────────────────────────────

def test_grievance_read_owner_or_admin():
    grievance = ResourceSnapshot(id="g1", owner_id="owner", status="submitted")
    assert evaluate(OWNER, ResourceType.GRIEVANCE, grievance, Action.READ).allowed
    assert evaluate(ADMIN, ResourceType.GRIEVANCE, grievance, Action.READ).reason == DecisionReason.ADMIN
    assert not evaluate(OTHER, ResourceType.GRIEVANCE, grievance, Action.READ).allowed


def test_grievance_status_is_admin_only_even_for_owner():
    grievance = ResourceSnapshot(id="g1", owner_id="owner", status="submitted")
    denied = evaluate(OWNER, ResourceType.GRIEVANCE, grievance, Action.UPDATE_STATUS)
    assert denied.reason == DecisionReason.ADMIN_REQUIRED
    assert evaluate(ADMIN, ResourceType.GRIEVANCE, grievance, Action.UPDATE_STATUS).allowed


def test_grievances_cannot_be_deleted():
    grievance = ResourceSnapshot(id="g1", owner_id="owner")
    assert not evaluate(ADMIN, ResourceType.GRIEVANCE, grievance, Action.DELETE).allowed


def test_profile_status_is_admin_only():
    profile = ResourceSnapshot(id="owner", owner_id="owner", status="pending")
    assert not evaluate(OWNER, ResourceType.PROFILE, profile, Action.UPDATE_STATUS).allowed
    assert evaluate(ADMIN, ResourceType.PROFILE, profile, Action.UPDATE_STATUS).allowed
    assert evaluate(OWNER, ResourceType.PROFILE, profile, Action.READ).allowed


# ─── Support tickets & messages ──────────────────────────────────

def test_ticket_read_by_participants():
    ticket = _ticket(assignee="assignee")
    assert evaluate(OWNER, ResourceType.SUPPORT_TICKET, ticket, Action.READ).reason == DecisionReason.OWNER
    assert evaluate(ASSIGNEE, ResourceType.SUPPORT_TICKET, ticket, Action.READ).reason == DecisionReason.ASSIGNEE
    assert evaluate(ADMIN, ResourceType.SUPPORT_TICKET, ticket, Action.READ).allowed
    assert evaluate(OTHER, ResourceType.SUPPORT_TICKET, ticket, Action.READ).reason == DecisionReason.NOT_PARTICIPANT


def test_unassigned_ticket_does_not_match_missing_assignee():
    ticket = _ticket(assignee=None)
    assert not evaluate(OTHER, ResourceType.SUPPORT_TICKET, ticket, Action.READ).allowed


@pytest.mark.parametrize("action", [Action.UPDATE_STATUS, Action.ASSIGN])
def test_ticket_triage_is_admin_only(action):
    ticket = _ticket(assignee="assignee")
    assert not evaluate(OWNER, ResourceType.SUPPORT_TICKET, ticket, action).allowed
    assert not evaluate(ASSIGNEE, ResourceType.SUPPORT_TICKET, ticket, action).allowed
    assert evaluate(ADMIN, ResourceType.SUPPORT_TICKET, ticket, action).allowed


def test_message_create_follows_parent_ticket():
    message = ResourceSnapshot(id=None, owner_id="assignee", parent=_ticket(assignee="assignee"))
    assert evaluate(ASSIGNEE, ResourceType.TICKET_MESSAGE, message, Action.CREATE).allowed
    outsider = ResourceSnapshot(id=None, owner_id="other", parent=_ticket())
    assert not evaluate(OTHER, ResourceType.TICKET_MESSAGE, outsider, Action.CREATE).allowed


def test_message_without_parent_is_not_found():
    message = ResourceSnapshot(id=None, owner_id="owner", parent=None)
    decision = evaluate(OWNER, ResourceType.TICKET_MESSAGE, message, Action.CREATE)
    assert decision.reason == DecisionReason.PARENT_NOT_FOUND
    assert decision.error_kind == ErrorKind.NOT_FOUND


@pytest.mark.parametrize("action", [Action.READ, Action.CREATE])
def test_internal_note_is_admin_only(action):
    note = ResourceSnapshot(
        id="m1", owner_id="admin", parent=_ticket(assignee="assignee"),
        fields={"is_internal": True},
    )
    decision = evaluate(OWNER, ResourceType.TICKET_MESSAGE, note, action)
    assert decision.reason == DecisionReason.ADMIN_REQUIRED
    assert decision.error_kind == ErrorKind.FORBIDDEN
    assert not evaluate(ASSIGNEE, ResourceType.TICKET_MESSAGE, note, action).allowed
    assert evaluate(ADMIN, ResourceType.TICKET_MESSAGE, note, action).allowed


def test_public_message_readable_by_participants():
    message = ResourceSnapshot(id="m1", owner_id="owner", parent=_ticket(assignee="assignee"))
    for who in (OWNER, ASSIGNEE, ADMIN):
        assert evaluate(who, ResourceType.TICKET_MESSAGE, message, Action.READ).allowed
    assert not evaluate(OTHER, ResourceType.TICKET_MESSAGE, message, Action.READ).allowed


# ─── Ratings ─────────────────────────────────────────────────────

def test_rating_another_member_is_allowed():
    assert evaluate(OWNER, ResourceType.RATING, _rating(), Action.CREATE).allowed


def test_self_rating_is_invalid_input():
    decision = evaluate(OWNER, ResourceType.RATING, _rating(rated="owner"), Action.CREATE)
    assert decision.reason == DecisionReason.SELF_RATING
    assert decision.error_kind == ErrorKind.INVALID_INPUT
    assert decision.to_rejection().code == "SELF_RATING"


@pytest.mark.parametrize("value", [0, 6, -1, 3.5, True, None])
def test_rating_value_out_of_range(value):
    decision = evaluate(OWNER, ResourceType.RATING, _rating(value=value), Action.CREATE)
    assert decision.reason == DecisionReason.RATING_OUT_OF_RANGE
    assert decision.error_kind == ErrorKind.INVALID_INPUT


@pytest.mark.parametrize("value", [1, 5])
def test_rating_bounds_are_inclusive(value):
    assert evaluate(OWNER, ResourceType.RATING, _rating(value=value), Action.CREATE).allowed


def test_rating_without_rated_user():
    decision = evaluate(OWNER, ResourceType.RATING, _rating(rated=None), Action.CREATE)
    assert decision.reason == DecisionReason.RATED_USER_MISSING


def test_ratings_cannot_be_updated():
    assert not evaluate(OWNER, ResourceType.RATING, _rating(), Action.UPDATE_OWN_FIELDS).allowed


# ─── Decisions ───────────────────────────────────────────────────

def test_allowed_decision_has_no_rejection():
    decision = evaluate(OWNER, ResourceType.HELP_POST, _post(), Action.READ)
    assert decision.to_rejection() is None


def test_evaluate_is_deterministic():
    args = (OTHER, ResourceType.HELP_POST, _post(), Action.DELETE)
    assert evaluate(*args) == evaluate(*args)


# ─── list_scope ──────────────────────────────────────────────────

def test_admin_list_scope_is_unrestricted():
    assert list_scope(ADMIN, ResourceType.GRIEVANCE).unrestricted


def test_member_grievance_scope_is_own_rows():
    assert list_scope(OWNER, ResourceType.GRIEVANCE) == ListScope(
        user_id="owner", relations=(Relation.OWNER,),
    )


def test_member_ticket_scope_includes_assigned():
    scope = list_scope(ASSIGNEE, ResourceType.SUPPORT_TICKET)
    assert scope.user_id == "assignee"
    assert set(scope.relations) == {Relation.OWNER, Relation.ASSIGNEE}


def test_help_post_list_is_unrestricted():
    assert list_scope(OWNER, ResourceType.HELP_POST).unrestricted
