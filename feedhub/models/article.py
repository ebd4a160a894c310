"""Article model for normalized feed entries."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import DBModel


class Article(DBModel):
    """Article model."""

    subscription_id: int = Field(..., description="Foreign key to subscriptions table")
    title: str = Field(..., description="Article title")
    url: str = Field(..., description="Canonical article URL")
    image_url: Optional[str] = Field(None, description="Article image URL")
    content: str = Field("", description="Article body (content, falling back to description)")
    published_at: datetime = Field(..., description="Publication timestamp")
    translated_title: Optional[str] = Field(None, description="Title translated to the target language")
    is_read: bool = Field(False, description="Read flag")
    is_favorite: bool = Field(False, description="Favorite flag")
    is_hidden: bool = Field(False, description="Hidden flag")
