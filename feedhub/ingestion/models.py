"""Data models for ingestion."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class Enclosure(BaseModel):
    """Media enclosure attached to a feed entry."""

    url: str = Field(..., description="Enclosure URL")
    type: str = Field("", description="Declared MIME type")


class RawEntry(BaseModel):
    """Parsed feed entry, independent of RSS or Atom."""

    title: str = Field("", description="Entry title")
    link: str = Field("", description="Entry URL")
    description: str = Field("", description="Entry description/summary")
    content: str = Field("", description="Full entry content")
    image_url: Optional[str] = Field(None, description="Structured entry image")
    enclosures: List[Enclosure] = Field(default_factory=list, description="Entry enclosures")
    published: Optional[datetime] = Field(None, description="Publication date")


class RawFeedDocument(BaseModel):
    """Parsed feed, consumed right away by the normalizer."""

    title: str = Field("", description="Feed title")
    link: str = Field("", description="Website link")
    description: str = Field("", description="Feed description")
    image_url: Optional[str] = Field(None, description="Feed image")
    entries: List[RawEntry] = Field(default_factory=list, description="Entries in document order")
