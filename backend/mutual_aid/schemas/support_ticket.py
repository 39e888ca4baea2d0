"""Support Ticket Schemas — tickets and thread messages.

Invariants:
    - priority is one of TicketPriority; new tickets default to medium
    - assigned_to may be explicitly null (unassign); absent means unchanged
"""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

Priority = Literal["low", "medium", "high", "urgent"]


class TicketCreate(BaseModel):
    subject: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1, max_length=10_000)
    priority: Priority = "medium"

    @field_validator("subject", "message")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty or whitespace")
        return v


class TicketUpdate(BaseModel):
    """Triage payload — every field is admin-only."""
    status: str | None = None
    priority: Priority | None = None
    assigned_to: UUID | None = None

    @property
    def assignment_requested(self) -> bool:
        return "assigned_to" in self.model_fields_set


class TicketMessageCreate(BaseModel):
    ticket_id: UUID
    message: str = Field(min_length=1, max_length=10_000)
    is_internal: bool = False

    @field_validator("message")
    @classmethod
    def strip_message(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("message cannot be empty or whitespace")
        return v
