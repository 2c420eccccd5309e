"""Pydantic schemas for category API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CategoryBody(BaseModel):
    """Body for creating or renaming a category."""

    name: str = Field(..., max_length=64)


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    created_at: datetime | None = None
