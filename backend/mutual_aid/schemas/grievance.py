"""Grievance Schemas."""

from pydantic import BaseModel, Field, field_validator


class GrievanceCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=5000)
    category: str = Field(min_length=1, max_length=100)

    @field_validator("title", "description", "category")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty or whitespace")
        return v


class GrievanceUpdate(BaseModel):
    """Admin review payload."""
    status: str | None = None
    admin_notes: str | None = Field(None, max_length=5000)
