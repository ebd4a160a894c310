"""Subscription model for feed sources."""

from typing import Optional

from pydantic import Field

from .base import DBModel

SCRIPT_URL_PREFIX = "script://"

# Placeholder subscription holding articles pulled from a FreshRSS server
SYNCED_URL = "freshrss://synced"


class Subscription(DBModel):
    """A subscribed feed source, fetched either by URL or by a local script."""

    title: str = Field(..., description="Display title")
    url: str = Field("", description="Feed URL, or script:// placeholder for script feeds")
    link: str = Field("", description="Website link reported by the feed")
    description: str = Field("", description="Feed description")
    category: str = Field("", description="Category label")
    image_url: str = Field("", description="Cached feed image URL")
    script_path: str = Field("", description="Script path relative to the scripts directory")
    last_error: str = Field("", description="Error from the latest fetch, empty if it succeeded")

    @property
    def uses_script(self) -> bool:
        """Whether this subscription is fetched through a script."""
        return bool(self.script_path)

    @property
    def is_synced(self) -> bool:
        """Whether this is the FreshRSS placeholder, which has nothing to fetch."""
        return self.url == SYNCED_URL and not self.script_path

    @property
    def locator(self) -> str:
        """Human readable source locator."""
        if self.uses_script:
            return SCRIPT_URL_PREFIX + self.script_path
        return self.url
