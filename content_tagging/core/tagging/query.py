"""
Query for listing the content items behind a set of tags.

The result is one row per tagged item (whatever its type) with the item's
generic content columns, so a tag page can list articles, contacts and anything
else side by side.
"""
from __future__ import annotations

from typing import Iterable, Union

from django.contrib.auth import get_user_model
from django.db import models
from django.db.models import Case, Count, F, Max, When
from django.utils.translation import gettext as _

from .access import UserType, get_authorised_view_levels, resolve_language_filter
from .content_types import list_types
from .data import TagItemDataQuerySet
from .exceptions import TagValidationError
from .models import ContentItemTagMap, PublishedState, TagTree
from .models.base import ALL_LANGUAGES
from .models.utils import TAGS_SEPARATOR

IdList = Union[int, str, Iterable[Union[int, str]]]

# Generic content columns included (as MAX over the matching mapping rows) in each row.
CORE_COLUMNS = (
    "core_title",
    "core_alias",
    "core_body",
    "core_state",
    "core_access",
    "core_metadata",
    "core_created_by_alias",
    "core_created_time",
    "core_images",
    "core_language",
    "core_catid",
    "core_publish_up",
    "core_publish_down",
)

MATCH_COUNT = "match_count"

# Names accepted by `order_by`, mapped to the column of the result to sort on.
ORDERING_COLUMNS = {
    **{column: column for column in CORE_COLUMNS},
    "core_modified_time": "core_modified_time",
    "core_created_user_id": "core_created_user_id",
    "core_content_id": "core_content_id",
    "content_item_id": "content_item_id",
    "type_alias": "type_alias",
    "tag_date": "latest_tag_date",
    "content_type_title": "content_type_title",
    "author": "author",
    MATCH_COUNT: MATCH_COUNT,
}

DEFAULT_STATES = (PublishedState.UNPUBLISHED, PublishedState.PUBLISHED)


def _parse_ids(values: IdList, what: str) -> list[int]:
    """
    Accepts an int, a comma separated string or an iterable; returns unique ints in order.
    """
    if isinstance(values, (int, str)):
        values = str(values).split(TAGS_SEPARATOR)
    ids = []
    for value in values:
        text = str(value).strip()
        if not text:
            continue
        try:
            ids.append(int(text))
        except ValueError as e:
            raise TagValidationError(
                _("Invalid {what}: {value!r}").format(what=what, value=value)
            ) from e
    return list(dict.fromkeys(ids))


def _get_ordering(order_by: str, order_dir: str) -> str:
    """
    Returns the order_by() argument for the requested sort, or raises TagValidationError.
    """
    column = order_by.strip()
    # Accept column names qualified with the table prefixes of raw SQL callers
    if column[:2] in ("c.", "m."):
        column = column[2:]
    if column not in ORDERING_COLUMNS:
        raise TagValidationError(_("Cannot order tagged items by '{column}'.").format(column=order_by))

    direction = order_dir.strip().upper()
    if direction not in ("ASC", "DESC"):
        raise TagValidationError(_("Invalid order direction '{direction}'.").format(direction=order_dir))
    prefix = "-" if direction == "DESC" else ""
    return f"{prefix}{ORDERING_COLUMNS[column]}"


def get_tag_items_query(
    tag_ids: IdList,
    type_filter: Iterable[str | int] | str | int | None = None,
    include_children: bool = False,
    order_by: str = "core_title",
    order_dir: str = "ASC",
    match_any: bool = True,
    language_filter: str | None = "all",
    state_filter: IdList = DEFAULT_STATES,
    user: UserType | None = None,
) -> TagItemDataQuerySet:
    """
    Returns a lazy QuerySet of the content items tagged with the given tags.

    tag_ids: tag ids, as a list or a comma separated string.
    type_filter: type aliases and/or type ids to limit the results to; by
        default all registered types are included.
    include_children: also match items tagged with any descendant of the
        given tags. When set, match_any is ignored.
    match_any: when False and more than one tag is given, only items carrying
        every one of the tags are included.
    language_filter: "all", "current" or a language code; items for all
        languages ('*') always match.
    state_filter: publication states of the items to include.
    user: only items with an access level this user may view are included.

    Each row is a dict as described by TagItemData. Nothing is run against the
    database until the QuerySet is evaluated.
    """
    requested_ids = _parse_ids(tag_ids, "tag id")
    states = _parse_ids(state_filter, "state")
    ordering = _get_ordering(order_by, order_dir)

    if include_children:
        tree = TagTree()
        expanded: list[int] = []
        for tag_id in requested_ids:
            expanded.extend(tree.descendants(tag_id))
        match_ids = list(dict.fromkeys(expanded))
    else:
        match_ids = requested_ids

    qs = ContentItemTagMap.objects.filter(
        tag_id__in=match_ids,
        type_alias__in=list_types(type_filter, use_alias=None).values("type_alias"),
        core_content__core_type_alias=F("type_alias"),
        core_content__core_state__in=states,
        core_content__core_access__in=get_authorised_view_levels(user),
    )
    language_code = resolve_language_filter(language_filter)
    if language_code:
        qs = qs.filter(core_content__core_language__in=[language_code, ALL_LANGUAGES])

    user_model = get_user_model()
    qs = qs.values("type_alias", "content_item_id", "core_content_id").annotate(
        match_count=Count("tag_id"),
        latest_tag_date=Max("tag_date"),
        **{column: Max(f"core_content__{column}") for column in CORE_COLUMNS},
        core_created_user_id=Max("core_content__core_created_user"),
        core_modified_time=Max(
            Case(
                When(core_content__core_modified_time__isnull=True, then=F("core_content__core_created_time")),
                default=F("core_content__core_modified_time"),
            )
        ),
        content_type_title=Max("content_type__type_title"),
        router=Max("content_type__router"),
        author=Max(
            Case(
                When(core_content__core_created_by_alias__gt=" ", then=F("core_content__core_created_by_alias")),
                default=F(f"core_content__core_created_user__{user_model.USERNAME_FIELD}"),
                output_field=models.CharField(),
            )
        ),
        author_email=Max(f"core_content__core_created_user__{user_model.get_email_field_name()}"),
    )

    # Items must carry every requested tag
    if not match_any and not include_children and len(requested_ids) > 1:
        qs = qs.filter(match_count=len(requested_ids))

    return qs.order_by(ordering, "type_alias", "content_item_id")
