"""Resource Access Policy — one deny-by-default rule table for every resource type.

Invariants:
    - evaluate() is PURE and total: never raises, never reads state, same input
      always yields the same AccessDecision
    - Deny by default: a (resource_type, action) pair missing from _RULES is denied
    - Unauthenticated callers are denied before any rule runs, except where the rule
      is public (Rating read)
    - Admin wins wherever the table lists admin as a grantor; there is no admin
      override on owner-only rules (HelpPost writes)
    - is_approved=False is denied HelpPost create regardless of role
    - Internal ticket notes (is_internal) are read and written by admins only

Design Decisions:
    - Rule lookup (resource_type × action → predicate) instead of per-endpoint
      branching: the routes only ever call evaluate() and list_scope()
    - Decisions carry a DecisionReason, and the reason decides the error kind:
      self-rating and bad rating values are input errors, a missing parent ticket
      is not-found, everything else denied is forbidden
    - List reads are not per-row decisions: list_scope() returns a pre-filter the
      storage query must apply
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from mutual_aid.core.domain_types import (
    Action, ResourceType, MIN_RATING, MAX_RATING,
)
from mutual_aid.core.identity import Identity
from mutual_aid.core.rejection import ErrorKind, Rejection
from mutual_aid.core.resource import ResourceSnapshot


class DecisionReason(str, Enum):
    # grants
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    APPROVED_USER = "approved_user"
    OWNER = "owner"
    ASSIGNEE = "assignee"
    ADMIN = "admin"
    # denials
    UNAUTHENTICATED = "unauthenticated"
    ACTION_NOT_SUPPORTED = "action_not_supported"
    NOT_APPROVED = "not_approved"
    NOT_OWNER = "not_owner"
    NOT_PARTICIPANT = "not_participant"
    ADMIN_REQUIRED = "admin_required"
    SELF_RATING = "self_rating"
    RATED_USER_MISSING = "rated_user_missing"
    RATING_OUT_OF_RANGE = "rating_out_of_range"
    PARENT_NOT_FOUND = "parent_not_found"


_DENIAL_KINDS: dict[DecisionReason, ErrorKind] = {
    DecisionReason.UNAUTHENTICATED: ErrorKind.UNAUTHENTICATED,
    DecisionReason.SELF_RATING: ErrorKind.INVALID_INPUT,
    DecisionReason.RATED_USER_MISSING: ErrorKind.INVALID_INPUT,
    DecisionReason.RATING_OUT_OF_RANGE: ErrorKind.INVALID_INPUT,
    DecisionReason.PARENT_NOT_FOUND: ErrorKind.NOT_FOUND,
}

_DENIAL_MESSAGES: dict[DecisionReason, str] = {
    DecisionReason.UNAUTHENTICATED: "Authentication required",
    DecisionReason.ACTION_NOT_SUPPORTED: "This action is not available for this resource",
    DecisionReason.NOT_APPROVED: "Your account must be approved before posting",
    DecisionReason.NOT_OWNER: "Only the owner may perform this action",
    DecisionReason.NOT_PARTICIPANT: "Access denied",
    DecisionReason.ADMIN_REQUIRED: "Admin access required",
    DecisionReason.SELF_RATING: "Cannot rate yourself",
    DecisionReason.RATED_USER_MISSING: "rated_user_id is required",
    DecisionReason.RATING_OUT_OF_RANGE: (
        f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}"
    ),
    DecisionReason.PARENT_NOT_FOUND: "Ticket not found",
}


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: DecisionReason

    @property
    def error_kind(self) -> ErrorKind | None:
        if self.allowed:
            return None
        return _DENIAL_KINDS.get(self.reason, ErrorKind.FORBIDDEN)

    def to_rejection(self) -> Rejection | None:
        """Rejection for a denied decision, None when allowed."""
        kind = self.error_kind
        if kind is None:
            return None
        return Rejection(
            kind, self.reason.value.upper(), _DENIAL_MESSAGES[self.reason],
        )


Rule = Callable[[Identity, ResourceSnapshot | None], AccessDecision]


def _allow(reason: DecisionReason) -> AccessDecision:
    return AccessDecision(True, reason)


def _deny(reason: DecisionReason) -> AccessDecision:
    return AccessDecision(False, reason)


def _is_owner(identity: Identity, resource: ResourceSnapshot | None) -> bool:
    return resource is not None and resource.owner_id == identity.id


def _is_assignee(identity: Identity, resource: ResourceSnapshot | None) -> bool:
    return (
        resource is not None
        and resource.assignee_id is not None
        and resource.assignee_id == identity.id
    )


# --- Rule predicates ----------------------------------------------------------

def _any_authenticated(identity: Identity, resource: ResourceSnapshot | None) -> AccessDecision:
    return _allow(DecisionReason.AUTHENTICATED)


def _approved_user(identity: Identity, resource: ResourceSnapshot | None) -> AccessDecision:
    if not identity.is_approved:
        return _deny(DecisionReason.NOT_APPROVED)
    return _allow(DecisionReason.APPROVED_USER)


def _owner_only(identity: Identity, resource: ResourceSnapshot | None) -> AccessDecision:
    if _is_owner(identity, resource):
        return _allow(DecisionReason.OWNER)
    return _deny(DecisionReason.NOT_OWNER)


def _owner_or_admin(identity: Identity, resource: ResourceSnapshot | None) -> AccessDecision:
    if identity.is_admin:
        return _allow(DecisionReason.ADMIN)
    return _owner_only(identity, resource)


def _admin_only(identity: Identity, resource: ResourceSnapshot | None) -> AccessDecision:
    if identity.is_admin:
        return _allow(DecisionReason.ADMIN)
    return _deny(DecisionReason.ADMIN_REQUIRED)


def _ticket_participant(identity: Identity, ticket: ResourceSnapshot | None) -> AccessDecision:
    """Owner, assignee, or admin of a support ticket."""
    if identity.is_admin:
        return _allow(DecisionReason.ADMIN)
    if _is_owner(identity, ticket):
        return _allow(DecisionReason.OWNER)
    if _is_assignee(identity, ticket):
        return _allow(DecisionReason.ASSIGNEE)
    return _deny(DecisionReason.NOT_PARTICIPANT)


def _ticket_message_access(
    identity: Identity, message: ResourceSnapshot | None,
) -> AccessDecision:
    """Participants of the parent ticket; internal notes are admin-only."""
    if message is None or message.parent is None:
        return _deny(DecisionReason.PARENT_NOT_FOUND)
    if message.value("is_internal") and not identity.is_admin:
        return _deny(DecisionReason.ADMIN_REQUIRED)
    return _ticket_participant(identity, message.parent)


def _rating_create(identity: Identity, rating: ResourceSnapshot | None) -> AccessDecision:
    """Any authenticated user, never for self, integer value within bounds."""
    rated_user_id = rating.value("rated_user_id") if rating is not None else None
    if not rated_user_id:
        return _deny(DecisionReason.RATED_USER_MISSING)
    rater_id = rating.owner_id or identity.id
    if rated_user_id == rater_id or rated_user_id == identity.id:
        return _deny(DecisionReason.SELF_RATING)

    value = rating.value("rating")
    # bool is an int subclass; True is not a rating
    if isinstance(value, bool) or not isinstance(value, int):
        return _deny(DecisionReason.RATING_OUT_OF_RANGE)
    if not MIN_RATING <= value <= MAX_RATING:
        return _deny(DecisionReason.RATING_OUT_OF_RANGE)
    return _allow(DecisionReason.AUTHENTICATED)


# --- Rule table ---------------------------------------------------------------

_RULES: dict[tuple[ResourceType, Action], Rule] = {
    (ResourceType.HELP_POST, Action.READ): _any_authenticated,
    (ResourceType.HELP_POST, Action.CREATE): _approved_user,
    (ResourceType.HELP_POST, Action.UPDATE_OWN_FIELDS): _owner_only,
    (ResourceType.HELP_POST, Action.UPDATE_STATUS): _owner_only,
    (ResourceType.HELP_POST, Action.DELETE): _owner_only,

    (ResourceType.GRIEVANCE, Action.READ): _owner_or_admin,
    (ResourceType.GRIEVANCE, Action.CREATE): _any_authenticated,
    (ResourceType.GRIEVANCE, Action.UPDATE_STATUS): _admin_only,

    (ResourceType.SUPPORT_TICKET, Action.READ): _ticket_participant,
    (ResourceType.SUPPORT_TICKET, Action.CREATE): _any_authenticated,
    (ResourceType.SUPPORT_TICKET, Action.UPDATE_STATUS): _admin_only,
    (ResourceType.SUPPORT_TICKET, Action.ASSIGN): _admin_only,

    (ResourceType.TICKET_MESSAGE, Action.READ): _ticket_message_access,
    (ResourceType.TICKET_MESSAGE, Action.CREATE): _ticket_message_access,

    (ResourceType.RATING, Action.CREATE): _rating_create,

    (ResourceType.PROFILE, Action.READ): _owner_or_admin,
    (ResourceType.PROFILE, Action.UPDATE_STATUS): _admin_only,
}

# Rules that also admit callers without an identity
_PUBLIC: frozenset[tuple[ResourceType, Action]] = frozenset({
    (ResourceType.RATING, Action.READ),
})


def evaluate(
    identity: Identity | None,
    resource_type: ResourceType,
    resource: ResourceSnapshot | None,
    action: Action,
) -> AccessDecision:
    """Decide whether identity may perform action on resource."""
    key = (resource_type, action)
    if key in _PUBLIC:
        return _allow(DecisionReason.PUBLIC)
    if identity is None:
        return _deny(DecisionReason.UNAUTHENTICATED)
    rule = _RULES.get(key)
    if rule is None:
        return _deny(DecisionReason.ACTION_NOT_SUPPORTED)
    return rule(identity, resource)


# --- List pre-filters ---------------------------------------------------------

class Relation(str, Enum):
    """How a row relates to the caller, for list pre-filters."""
    OWNER = "owner"
    ASSIGNEE = "assignee"


@dataclass(frozen=True)
class ListScope:
    """Pre-filter for list reads. user_id=None means every row is visible."""
    user_id: str | None = None
    relations: tuple[Relation, ...] = ()

    @property
    def unrestricted(self) -> bool:
        return self.user_id is None


_LIST_RELATIONS: dict[ResourceType, tuple[Relation, ...]] = {
    ResourceType.GRIEVANCE: (Relation.OWNER,),
    ResourceType.SUPPORT_TICKET: (Relation.OWNER, Relation.ASSIGNEE),
}


def list_scope(identity: Identity, resource_type: ResourceType) -> ListScope:
    """Rows a caller may see in a list read. Admins see everything."""
    relations = _LIST_RELATIONS.get(resource_type)
    if relations is None or identity.is_admin:
        return ListScope()
    return ListScope(user_id=identity.id, relations=relations)
