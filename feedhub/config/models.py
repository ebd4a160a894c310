"""Configuration models."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class PostgresConfig(BaseModel):
    """Postgres configuration."""

    host: str = Field("localhost", description="Database host")
    port: int = Field(5432, description="Database port")
    database: str = Field("feedhub", description="Database name")
    user: str = Field("feedhub_user", description="Database user")
    password: Optional[str] = Field(None, description="Database password")
    password_env: Optional[str] = Field(None, description="Environment variable for password")


class FetchConfig(BaseModel):
    """Feed fetching configuration."""

    script_timeout: float = Field(30.0, description="Hard timeout for feed scripts in seconds", gt=0)
    request_timeout: Optional[float] = Field(
        None,
        description="Per-request HTTP timeout in seconds (None waits until the batch is cancelled)",
    )
    user_agent: str = Field("feedhub/1.0 (RSS reader)", description="HTTP User-Agent header")


class RuleConfig(BaseModel):
    """Keyword rule applied to newly fetched articles."""

    name: str = Field(..., description="Rule name")
    keywords: List[str] = Field(..., description="Keywords, any of which triggers the rule")
    field: Literal["title", "content", "any"] = Field("any", description="Article field to match")
    action: Literal["mark_read", "favorite", "hide"] = Field(..., description="Flag to set on match")

    @field_validator("keywords")
    @classmethod
    def validate_keywords(cls, v: List[str]) -> List[str]:
        """Drop blank keywords and require at least one."""
        keywords = [k.strip() for k in v if k.strip()]
        if not keywords:
            raise ValueError("Rule needs at least one keyword")
        return keywords


class ConfigModel(BaseModel):
    """Main configuration model."""

    workspace_root: str = Field("~/FeedHub", description="Root directory for scripts and data")
    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    rules: List[RuleConfig] = Field(default_factory=list)


class SourceConfig(BaseModel):
    """Source entry from sources.yaml, used for bulk import."""

    name: str = Field(..., description="Source name")
    url: str = Field(..., description="RSS feed URL")
    category: str = Field("", description="Source category")
