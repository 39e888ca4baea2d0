"""Help Post Schemas — create/update payloads with coordinate-pair validation.

Invariants:
    - latitude/longitude are both present or both absent, and within range
    - title/description/category are stripped and non-empty
    - status on update is a raw string; the transition engine validates it
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from mutual_aid.core.geo import check_coordinate_pair


def _stripped(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("cannot be empty or whitespace")
    return v


class HelpPostCreate(BaseModel):
    type: Literal["need_help", "offer_help"]
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=5000)
    category: str = Field(min_length=1, max_length=100)
    latitude: float | None = None
    longitude: float | None = None

    @field_validator("title", "description", "category")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return _stripped(v)

    @model_validator(mode="after")
    def validate_coordinates(self):
        error = check_coordinate_pair(self.latitude, self.longitude)
        if error:
            raise ValueError(error)
        return self


class HelpPostUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=1, max_length=5000)
    category: str | None = Field(None, min_length=1, max_length=100)
    status: str | None = None
    latitude: float | None = None
    longitude: float | None = None

    @field_validator("title", "description", "category")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        # null means "leave unchanged"
        return _stripped(v) if v is not None else None

    @model_validator(mode="after")
    def validate_coordinates(self):
        touched = self.model_fields_set & {"latitude", "longitude"}
        if touched:
            error = check_coordinate_pair(self.latitude, self.longitude)
            if error:
                raise ValueError(error)
        return self

    def content_updates(self) -> dict:
        """Owner-editable fields that were actually sent (status excluded)."""
        updates = {
            name: getattr(self, name)
            for name in ("title", "description", "category")
            if getattr(self, name) is not None
        }
        if self.model_fields_set & {"latitude", "longitude"}:
            updates["latitude"] = self.latitude
            updates["longitude"] = self.longitude
        return updates
