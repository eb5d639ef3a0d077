"""
Data shapes returned by the content tagging API
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, TYPE_CHECKING, TypedDict

from attrs import define, field
from django.db.models import QuerySet
from typing_extensions import NotRequired, TypeAlias

# Outcomes of resolving one requested tag in tag_item()
APPLIED = "applied"  # Existing tag id, or text matching an existing title
CREATED = "created"  # Text that became a new tag
SKIPPED = "skipped"  # Dropped: malformed, or the new tag couldn't be stored


@define
class TagResolution:
    """
    What happened to one entry of the `tags` list passed to tag_item().
    """

    token: Any
    status: str
    tag_id: int | None = None
    error: str | None = None


@define
class TagItemResult:
    """
    Result of tag_item().

    Falsy when nothing was mapped, i.e. no tags were requested or none of them
    could be resolved. In that case the item's existing mappings are untouched.
    """

    tag_ids: list[int] = field(factory=list)
    resolutions: list[TagResolution] = field(factory=list)

    def __bool__(self) -> bool:
        return bool(self.tag_ids)

    @property
    def skipped(self) -> list[TagResolution]:
        return [resolution for resolution in self.resolutions if resolution.status == SKIPPED]

    @property
    def created(self) -> list[int]:
        return [r.tag_id for r in self.resolutions if r.status == CREATED and r.tag_id is not None]


class TagSearchResult(TypedDict):
    """
    One tag returned by search_tags().
    """
    # The tag id
    value: int
    # Titles of the tag's ancestors and of the tag itself, joined by "/"
    text: str
    # Aliases of the tag's ancestors and of the tag itself, joined by "/"
    path: str


class TagItemData(TypedDict):
    """
    One row of the query built by get_tag_items_query().

    Every column except the grouping keys and match_count is a MAX() over
    the mapping rows of the item that matched.
    """
    type_alias: str
    content_item_id: int
    core_content_id: int
    match_count: int
    latest_tag_date: datetime
    core_title: str
    core_alias: str
    core_body: str
    core_state: int
    core_access: int
    core_metadata: str
    core_created_user_id: int | None
    core_created_by_alias: str
    core_created_time: datetime
    core_modified_time: datetime
    core_images: str
    core_language: str
    core_catid: int
    core_publish_up: datetime | None
    core_publish_down: datetime | None
    content_type_title: str
    router: str
    author: str | None
    author_email: NotRequired[str | None]


if TYPE_CHECKING:
    from django_stubs_ext import ValuesQuerySet
    TagItemDataQuerySet: TypeAlias = ValuesQuerySet[Any, TagItemData]
else:
    TagItemDataQuerySet = QuerySet[TagItemData]
