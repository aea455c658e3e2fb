"""Content models for articles and banners.

Every model serializes with camelCase aliases (the wire format of the
admin UI) and accepts both camelCase and snake_case on input. Cached
entries are the JSON dump of these models.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Annotated, Any, Literal
from uuid import UUID

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 300
PRODUCT_TAG = "product"

_URL_PATTERN = re.compile(r"^(ftp|http|https)://[^ \"]+$")


def _validate_url(value: str | None) -> str | None:
    """Blank becomes None; anything else must be an ftp/http/https URL."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if not _URL_PATTERN.match(value):
        msg = f"{value} is not a valid URL!"
        raise ValueError(msg)
    return value


OptionalUrl = Annotated[str | None, AfterValidator(_validate_url)]


class _ContentModel(BaseModel):
    """Shared alias and validation configuration."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        serialize_by_alias=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# Articles
# =============================================================================


class ArticleSummary(_ContentModel):
    """Article projection used by list queries (no body content)."""

    id: UUID
    title: str
    description: str
    cover_image: str | None = None
    product_url: OptionalUrl = None
    tags: list[str] = []
    archived: bool = False
    slug: str
    created_at: datetime
    updated_at: datetime


class Article(ArticleSummary):
    """A full article as stored in the primary store."""

    content: str


class ArticleCreate(_ContentModel):
    """Fields accepted when creating an article."""

    model_config = ConfigDict(extra="ignore")

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str = Field(min_length=1, max_length=DESCRIPTION_MAX_LENGTH)
    content: str = Field(min_length=1)
    cover_image: str | None = None
    product_url: OptionalUrl = None
    tags: list[str] = []
    archived: bool = False

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, tags: list[str]) -> list[str]:
        return [tag.strip() for tag in tags if tag.strip()]

    @field_validator("cover_image")
    @classmethod
    def _blank_cover_is_none(cls, value: str | None) -> str | None:
        return value or None


class ArticleUpdate(_ContentModel):
    """Partial article update; only fields that were sent are applied."""

    model_config = ConfigDict(extra="ignore")

    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(
        default=None, min_length=1, max_length=DESCRIPTION_MAX_LENGTH
    )
    content: str | None = Field(default=None, min_length=1)
    cover_image: str | None = None
    product_url: OptionalUrl = None
    tags: list[str] | None = None
    archived: bool | None = None

    @field_validator("cover_image")
    @classmethod
    def _blank_cover_is_none(cls, value: str | None) -> str | None:
        return value or None

    @field_validator("title", "content", "archived", mode="before")
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        if value is None:
            msg = "cannot be null"
            raise ValueError(msg)
        return value

    def changes(self) -> dict[str, Any]:
        """Fields explicitly provided by the caller, keyed by column name."""
        return self.model_dump(exclude_unset=True, by_alias=False)


class ArticleQuery(_ContentModel):
    """Filter signature for article list queries.

    Two queries with equal fields share one list cache entry.
    """

    include_archived: bool = False
    tags: list[str] = []
    sort: Literal["newest", "oldest", "updated"] = "newest"
    limit: int | None = Field(default=None, ge=1, le=500)

    @field_validator("tags")
    @classmethod
    def _sorted_tags(cls, tags: list[str]) -> list[str]:
        return sorted({tag.strip() for tag in tags if tag.strip()})


# =============================================================================
# Banners
# =============================================================================


class BannerAction(_ContentModel):
    """Call-to-action attached to a banner."""

    action_text: str | None = None
    action_url: OptionalUrl = None
    is_external: bool = False

    @model_validator(mode="after")
    def _text_required_with_url(self) -> BannerAction:
        if self.action_url and not self.action_text:
            msg = "Action text is required when URL is provided"
            raise ValueError(msg)
        return self

    @property
    def is_empty(self) -> bool:
        return not self.action_url and not self.action_text


class Banner(_ContentModel):
    """A homepage banner. Banners have no slug."""

    id: UUID
    title: str
    banner_image: str | None = None
    action: BannerAction | None = None
    archived: bool = False
    created_at: datetime
    updated_at: datetime


class BannerCreate(_ContentModel):
    """Fields accepted when creating a banner."""

    model_config = ConfigDict(extra="ignore")

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    banner_image: str | None = None
    action: BannerAction | None = None
    archived: bool = False

    @field_validator("action")
    @classmethod
    def _drop_empty_action(cls, action: BannerAction | None) -> BannerAction | None:
        if action is None or action.is_empty:
            return None
        return action


class BannerUpdate(_ContentModel):
    """Partial banner update."""

    model_config = ConfigDict(extra="ignore")

    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    banner_image: str | None = Field(default=None, min_length=1)
    action: BannerAction | None = None
    archived: bool | None = None

    @field_validator("action")
    @classmethod
    def _drop_empty_action(cls, action: BannerAction | None) -> BannerAction | None:
        if action is None or action.is_empty:
            return None
        return action

    @field_validator("title", "banner_image", "archived", mode="before")
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        if value is None:
            msg = "cannot be null"
            raise ValueError(msg)
        return value

    def changes(self) -> dict[str, Any]:
        """Fields explicitly provided by the caller, keyed by column name."""
        return self.model_dump(exclude_unset=True, by_alias=False)


class BannerQuery(_ContentModel):
    """Filter signature for banner list queries."""

    include_archived: bool = False
