"""
Django rules-based permissions for content tagging
"""
from __future__ import annotations

from typing import Callable

# typing support in rules depends on https://github.com/dfunckt/django-rules/pull/177
import rules  # type: ignore[import]
from attrs import define

from .access import UserType, get_authorised_view_levels
from .models import PublishedState, Tag

# Global staff are tag admins.
# (Superusers can already do anything)
is_tag_admin: Callable[[UserType], bool] = rules.is_staff


@define
class ContentItemPermissionItem:
    """
    Pair of type alias and item id used for permission checking.
    """

    type_alias: str
    content_item_id: int


@rules.predicate
def can_view_tag(user: UserType, tag: Tag | None = None) -> bool:
    """
    Anyone can list tags, and view a published tag with an access level they are
    allowed to see. Tag admins can view any tag.
    """
    if not tag or is_tag_admin(user):
        return True
    return tag.published == PublishedState.PUBLISHED and tag.access in get_authorised_view_levels(user)


@rules.predicate
def can_change_tag(user: UserType, tag: Tag | None = None) -> bool:
    """
    Only tag admins can create, modify or delete tags. The root tag can't be changed at all.
    """
    return is_tag_admin(user) and not (tag and tag.is_root)


@rules.predicate
def can_change_content_item(_user: UserType, _perm_obj: ContentItemPermissionItem) -> bool:
    """
    Nobody can tag a content item without checking the permission for the item itself.

    This rule should be defined in other apps for proper permission checking.
    """
    return False


@rules.predicate
def can_tag_item(user: UserType, perm_obj: ContentItemPermissionItem | None = None) -> bool:
    """
    Tag admins can tag any content item; other users need the item permission.
    """
    if is_tag_admin(user):
        return True
    if perm_obj is None:
        return False
    return user.has_perm(
        "ct_tagging.change_content_item",
        # The obj arg expects a model instance, but the item may live in any table
        perm_obj,  # type: ignore[arg-type]
    )


# Tag
rules.add_perm("ct_tagging.add_tag", can_change_tag)
rules.add_perm("ct_tagging.change_tag", can_change_tag)
rules.add_perm("ct_tagging.delete_tag", can_change_tag)
rules.add_perm("ct_tagging.view_tag", can_view_tag)

# ContentItemType
rules.add_perm("ct_tagging.add_contentitemtype", is_tag_admin)
rules.add_perm("ct_tagging.change_contentitemtype", is_tag_admin)
rules.add_perm("ct_tagging.delete_contentitemtype", is_tag_admin)
rules.add_perm("ct_tagging.view_contentitemtype", rules.always_allow)

# ContentItemTagMap
# If a user "can tag item", they can replace or remove the tags of the given type_alias + content_item_id.
rules.add_perm("ct_tagging.can_tag_item", can_tag_item)
rules.add_perm("ct_tagging.change_content_item", can_change_content_item)
