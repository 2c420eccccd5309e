"""Pydantic schemas for post API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PostBody(BaseModel):
    """Body for creating or replacing a post."""

    title: str = Field(..., max_length=255)
    content: str
    category_id: str


class PostOut(BaseModel):
    """Single post as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    content: str
    approved: bool
    category_id: str
    user_id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
