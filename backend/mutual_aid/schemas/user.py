"""User Approval Schemas."""

from typing import Literal

from pydantic import BaseModel


class UserApproval(BaseModel):
    """Admin decision on a member's account; role is granted only on approval."""
    status: Literal["approved", "rejected", "suspended"]
    role: Literal["admin", "user"] | None = None
