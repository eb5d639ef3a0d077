"""
The tagging app's view of the current actor and language.

Which view levels a user may see is a policy of the surrounding project, so it
is looked up through the VIEW_LEVELS_FUNCTION setting. The default below is a
reasonable stand-in based on the Django auth flags.
"""
from __future__ import annotations

from typing import Union

import django.contrib.auth.models
from django.conf import settings
from django.utils import translation
from django.utils.module_loading import import_string

from .conf import get_setting
from .models import ViewLevel

UserType = Union[
    django.contrib.auth.models.User, django.contrib.auth.models.AnonymousUser
]


def default_view_levels(user: UserType | None) -> set[int]:
    """
    Everybody sees Public; anonymous users also see Guest, authenticated users
    see Registered, staff see Special, and superusers see Super Users.
    """
    levels = {ViewLevel.PUBLIC.value}
    if user is None or not user.is_authenticated:
        levels.add(ViewLevel.GUEST.value)
        return levels
    levels.add(ViewLevel.REGISTERED.value)
    if user.is_staff or user.is_superuser:
        levels.add(ViewLevel.SPECIAL.value)
    if user.is_superuser:
        levels.add(ViewLevel.SUPER_USERS.value)
    return levels


def get_authorised_view_levels(user: UserType | None = None) -> set[int]:
    """
    Returns the set of access level ids the given user may view.
    """
    view_levels_function = import_string(get_setting("VIEW_LEVELS_FUNCTION"))
    return set(view_levels_function(user))


def get_current_language() -> str:
    """
    Returns the active language code, or LANGUAGE_CODE outside of a request.
    """
    return translation.get_language() or settings.LANGUAGE_CODE


def resolve_language_filter(language_filter: str | None) -> str | None:
    """
    Turns a language filter option into the language code to filter on.

    Returns None for "all" (no filtering). "current" and "current_language"
    resolve to the active language.
    """
    if not language_filter or language_filter == "all":
        return None
    if language_filter in ("current", "current_language"):
        return get_current_language()
    return language_filter
