"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - Every status vocabulary is an Enum — no raw string matching in core logic
    - UserId is an opaque string (a stringified UUID from storage)
    - Enum values match the database enum labels exactly

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders and compare equal to
      the raw column value
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", str)


# ─── Access Vocabulary ───────────────────────────────────────────

class Role(str, Enum):
    """Application roles. A user may hold several at once."""
    ADMIN = "admin"
    USER = "user"


class ResourceType(str, Enum):
    """Record types subject to access control."""
    HELP_POST = "help_post"
    GRIEVANCE = "grievance"
    SUPPORT_TICKET = "support_ticket"
    TICKET_MESSAGE = "ticket_message"
    RATING = "rating"
    PROFILE = "profile"


class Action(str, Enum):
    """Operations an actor can request against a resource."""
    READ = "read"
    CREATE = "create"
    UPDATE_OWN_FIELDS = "update_own_fields"
    UPDATE_STATUS = "update_status"
    DELETE = "delete"
    ASSIGN = "assign"


# ─── Status Vocabularies ─────────────────────────────────────────

class HelpPostStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class GrievanceStatus(str, Enum):
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class UserStatus(str, Enum):
    """Profile approval lifecycle — only APPROVED users may post help."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SUSPENDED = "suspended"


# ─── Domain Field Vocabularies ───────────────────────────────────

class HelpPostType(str, Enum):
    NEED_HELP = "need_help"
    OFFER_HELP = "offer_help"


class TicketPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


# ─── Constants ───────────────────────────────────────────────────

EARTH_RADIUS_KM = 6371.0
MIN_RATING = 1
MAX_RATING = 5
