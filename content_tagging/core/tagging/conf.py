"""
Settings for the content tagging app.

Projects override any of these in a ``CONTENT_TAGGING`` dict in their Django
settings, e.g.::

    CONTENT_TAGGING = {
        "TAG_LIST_LANGUAGE_FILTER": "current",
    }
"""
from __future__ import annotations

from typing import Any

from django.conf import settings

DEFAULTS: dict[str, Any] = {
    # Language filter applied by get_item_tags() when the caller passes none:
    # "all", "current" or a language code.
    "TAG_LIST_LANGUAGE_FILTER": "all",
    # Access (view level) given to tags that are created on the fly.
    "DEFAULT_ACCESS": 1,
    # Dotted path of a function(user) -> set[int] of view levels the user may see.
    "VIEW_LEVELS_FUNCTION": "content_tagging.core.tagging.access.default_view_levels",
    # Prefix the tag input widgets put in front of text that isn't an existing tag id.
    "NEW_TAG_MARKER": "#new#",
}


def get_setting(name: str) -> Any:
    """
    Returns the configured value of the given CONTENT_TAGGING setting.
    """
    overrides = getattr(settings, "CONTENT_TAGGING", None) or {}
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]
