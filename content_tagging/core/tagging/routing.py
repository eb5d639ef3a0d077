"""
URL query strings for tagged items and tags.

The tagging app doesn't route requests itself; these helpers produce the
query part that the project's router understands.
"""
from __future__ import annotations

from urllib.parse import urlencode

from .content_types import explode_type_alias

TAGS_COMPONENT = "tags"


def get_type_name(type_alias: str) -> str:
    """
    Returns the component part of a type alias, e.g. "com_content".
    """
    return explode_type_alias(type_alias)[0]


def get_content_item_url(type_alias: str, item_id: int) -> str:
    """
    Returns e.g. "option=com_content&view=article&id=3" for ("com_content.article", 3).
    """
    component, view = explode_type_alias(type_alias)[:2]
    return urlencode({"option": component, "view": view, "id": item_id})


def get_tag_url(tag_id: int) -> str:
    """
    Returns the query string of the page listing the items of a tag.
    """
    return urlencode({"option": TAGS_COMPONENT, "view": "tag", "id": tag_id})
