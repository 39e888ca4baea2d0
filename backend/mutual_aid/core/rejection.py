"""Rejections — the value-level failure type returned by every core decision.

Invariants:
    - A Rejection is immutable and carries exactly one ErrorKind
    - Core functions return Rejection instead of raising; the shell converts it
      into a MutualAidError via core/errors.py::error_from_rejection

Design Decisions:
    - Frozen dataclass over error dicts: same "error path is a return value" shape,
      but typed so the shell can match on kind
"""

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    """Failure taxonomy shared by policy, transitions and input parsing."""
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    INVALID_INPUT = "invalid_input"
    INVALID_TRANSITION = "invalid_transition"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Rejection:
    kind: ErrorKind
    code: str
    message: str
    field: str | None = None


def invalid_input(code: str, message: str, field: str | None = None) -> Rejection:
    return Rejection(ErrorKind.INVALID_INPUT, code, message, field)
