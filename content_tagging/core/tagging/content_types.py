"""
Registry of the content types that can be tagged.

Every mapping row carries a type alias such as "com_content.article". This
module turns those aliases into ContentTypeInfo descriptors (numeric type id,
backing table, router) without interpolating table names anywhere.
"""
from __future__ import annotations

import logging
from typing import Iterable

from attrs import frozen
from django.db.models import Q, QuerySet
from django.utils.translation import gettext as _

from content_tagging.lib.cache import clear_lru_caches, lru_cache

from .exceptions import ContentTypeNotFound, TagValidationError
from .models import ContentItemType

log = logging.getLogger(__name__)


@frozen
class ContentTypeInfo:
    """
    Immutable description of a registered content type.
    """

    type_id: int
    type_alias: str
    table: str
    title: str
    router: str


def explode_type_alias(type_alias: str) -> list[str]:
    """
    Splits a type alias into its component and view parts.
    """
    return type_alias.split(".")


def register_type(type_alias: str, title: str, table: str, router: str = "") -> ContentTypeInfo:
    """
    Registers (or updates) the content type with the given alias.
    """
    parts = explode_type_alias(type_alias)
    if len(parts) != 2 or not all(parts):
        raise TagValidationError(
            _("Invalid type alias '{type_alias}'; expected 'component.view'.").format(type_alias=type_alias)
        )
    content_type, created = ContentItemType.objects.update_or_create(
        type_alias=type_alias,
        defaults={"type_title": title, "table": table, "router": router},
    )
    if created:
        log.info(f"Registered content type {content_type}")
    clear_lru_caches()
    return _to_info(content_type)


@lru_cache(maxsize=64)
def resolve_type(type_alias: str) -> ContentTypeInfo:
    """
    Returns the descriptor of the content type with exactly this alias.

    Raises ContentTypeNotFound if the alias isn't registered.
    """
    content_type = ContentItemType.objects.filter(type_alias=type_alias).first()
    if content_type is None:
        raise ContentTypeNotFound(type_alias)
    return _to_info(content_type)


def get_type_id(type_alias: str) -> int:
    return resolve_type(type_alias).type_id


def get_table_name(type_alias: str) -> str:
    return resolve_type(type_alias).table


def list_types(
    select_types: Iterable[str | int] | str | int | None = None,
    use_alias: bool | None = True,
) -> QuerySet[ContentItemType]:
    """
    Returns a QuerySet of the registered content types, ordered by id.

    Pass select_types to limit the results; its entries are matched against
    type aliases, or against numeric type ids if use_alias is False. With
    use_alias=None, numeric entries are taken as ids and the rest as aliases.
    A comma separated string is accepted as well as a list.
    """
    qs = ContentItemType.objects.order_by("id")
    if select_types is None or select_types == "" or select_types == []:
        return qs
    if isinstance(select_types, (str, int)):
        select_types = str(select_types).split(",")
    values = [str(value).strip() for value in select_types]
    ids = [int(value) for value in values if value.isdigit()]
    if use_alias:
        return qs.filter(type_alias__in=values)
    if use_alias is None:
        return qs.filter(Q(id__in=ids) | Q(type_alias__in=[value for value in values if not value.isdigit()]))
    return qs.filter(id__in=ids)


def _to_info(content_type: ContentItemType) -> ContentTypeInfo:
    return ContentTypeInfo(
        type_id=content_type.id,
        type_alias=content_type.type_alias,
        table=content_type.table,
        title=content_type.type_title,
        router=content_type.router,
    )
