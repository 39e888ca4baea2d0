"""Rating Schemas.

Invariants:
    - rating bounds and the self-rating rule are NOT checked here; the access
      policy owns them so every entry point answers the same way
    - rating reaches the policy exactly as sent: true, "5" and 4.0 are not
      coerced into integers
"""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class RatingCreate(BaseModel):
    rated_user_id: UUID
    rating: Any
    help_post_id: UUID | None = None
    comment: str | None = Field(None, max_length=2000)
