"""
Content Tagging API

Anyone using the content_tagging app should use these APIs instead of creating
or modifying the models directly, since tags live in a nested set and mapping
rows must stay consistent with it.

Permissions are not enforced here (see rules.py), but reads that are meant for
display are filtered by the view levels of the given user.

Please look at the models package for more information about the kinds of data
are stored in this app.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Union

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.db.models import Q, QuerySet
from django.utils import timezone
from django.utils.text import slugify
from django.utils.translation import gettext as _

from . import content_types
from .access import UserType, get_authorised_view_levels, resolve_language_filter
from .conf import get_setting
from .data import APPLIED, CREATED, SKIPPED, TagItemResult, TagResolution, TagSearchResult
from .exceptions import PersistenceError, TagNotFound, TagValidationError
from .models import ContentItemTagMap, CoreContent, PublishedState, Tag, TagTree
from .models.base import ALL_LANGUAGES
from .models.utils import PATH_SEPARATOR, TAGS_SEPARATOR
from .query import get_tag_items_query  # pylint: disable=unused-import

log = logging.getLogger(__name__)

# Export this as part of the API
TagDoesNotExist = Tag.DoesNotExist

TagToken = Union[int, str]
ItemIds = Union[int, str, Iterable[Union[int, str]]]


def _make_alias(title: str) -> str:
    """
    URL-safe alias for a tag title. Titles with nothing to slugify get a timestamp.
    """
    alias = slugify(title, allow_unicode=True)
    if not alias:
        alias = timezone.now().strftime("%Y-%m-%d-%H-%M-%S")
    return alias


def _find_or_create_tag(title: str, language: str, access: int) -> tuple[int, bool]:
    """
    Implementation of find_or_create_tag() that also says whether the tag is new.
    """
    title = title.strip()
    # The root tag is never applied to content, whatever its title
    existing_id = (
        Tag.objects.filter(title=title).exclude(parent=None)
        .order_by("lft").values_list("id", flat=True).first()
    )
    if existing_id is not None:
        return existing_id, False

    tag = Tag(
        title=title,
        alias=_make_alias(title),
        published=PublishedState.PUBLISHED,
        access=access,
        language=language,
    )
    try:
        tag.clean()
    except ValidationError as e:
        raise TagValidationError(" ".join(e.messages)) from e

    if Tag.objects.filter(alias=tag.alias).exists():
        raise PersistenceError(
            _("Cannot create tag '{title}': another tag already uses the alias '{alias}'.").format(
                title=title, alias=tag.alias,
            )
        )
    try:
        # New tags are always depth 1, so their path is their alias.
        TagTree().insert(tag)
    except DatabaseError as e:
        log.exception(f"Unable to store new tag '{title}'")
        raise PersistenceError(
            _("Cannot create tag '{title}': {error}").format(title=title, error=e)
        ) from e

    log.info(f"Created tag {tag}")
    return tag.pk, True


def find_or_create_tag(title: str, language: str = ALL_LANGUAGES, access: int | None = None) -> int:
    """
    Returns the id of the tag with exactly this title, creating it if needed.

    New tags are published, become the last child of the root, and get an
    alias derived from the title. Raises PersistenceError if the tag can't be
    stored (e.g. its alias is already taken), and TagValidationError if the
    title is not acceptable.
    """
    if access is None:
        access = get_setting("DEFAULT_ACCESS")
    tag_id, _created = _find_or_create_tag(title, language, access)
    return tag_id


def get_tag(tag_id: int) -> Tag | None:
    """
    Returns the Tag with the given id, or None.
    """
    return Tag.objects.filter(pk=tag_id).first()


def delete_tag_instances(tag_id: int) -> int:
    """
    Deletes every mapping row for the given tag. Returns how many were deleted.
    """
    try:
        deleted, _counts = ContentItemTagMap.objects.filter(tag_id=tag_id).delete()
    except DatabaseError as e:
        raise PersistenceError(_("Cannot delete mappings of tag {tag_id}: {error}").format(tag_id=tag_id, error=e)) from e
    return deleted


def delete_tag(tag_id: int, with_subtags: bool = False) -> int:
    """
    Deletes a tag after deleting every mapping row that uses it.

    A tag with children is refused unless `with_subtags` is True, in which case
    the mappings of the whole subtree are deleted and then the subtree itself.
    Returns how many tags were deleted.
    """
    tree = TagTree()
    subtree = tree.descendants(tag_id)
    if not subtree:
        raise TagNotFound(tag_id)
    if len(subtree) > 1 and not with_subtags:
        raise TagValidationError(
            _("Tag {tag_id} has children; `with_subtags` must be True to delete it.").format(tag_id=tag_id)
        )

    with transaction.atomic():
        for subtag_id in subtree:
            delete_tag_instances(subtag_id)
        try:
            return tree.remove(tag_id, with_subtags=with_subtags)
        except DatabaseError as e:
            raise PersistenceError(_("Cannot delete tag {tag_id}: {error}").format(tag_id=tag_id, error=e)) from e


def search_tags(
    like: str | None = None,
    title: str | None = None,
    language: str | None = None,
    published: int | None = None,
    parent_id: int | None = None,
) -> list[TagSearchResult]:
    """
    Returns the tags matching all the given filters, in tree order.

    like: part of the title or of the alias path.
    title: exact title.
    language: language code; tags for all languages ('*') always match.
    published: publication state.
    parent_id: limit the results to this tag and its descendants.

    The root tag is never returned. Each result's "text" is its path with the
    aliases replaced by titles.
    """
    qs = Tag.objects.exclude(parent=None)
    if language:
        qs = qs.filter(language__in=[language, ALL_LANGUAGES])
    if like:
        qs = qs.filter(Q(title__icontains=like) | Q(path__icontains=like))
    if title:
        qs = qs.filter(title=title)
    if published is not None:
        qs = qs.filter(published=published)
    if parent_id:
        qs = qs.filter(id__in=TagTree().descendants(parent_id))

    results: list[TagSearchResult] = [
        {"value": row["id"], "text": row["path"], "path": row["path"]}
        for row in qs.order_by("lft").values("id", "path")
    ]
    return convert_paths_to_names(results)


def convert_paths_to_names(results: list[TagSearchResult]) -> list[TagSearchResult]:
    """
    Replaces the aliases in each result's "text" with the matching tag titles.

    All the titles are loaded in a single query. Aliases that don't match any
    tag are kept as they are.
    """
    aliases = {
        alias
        for result in results if result["path"]
        for alias in result["path"].split(PATH_SEPARATOR)
    }
    if not aliases:
        return results

    titles = dict(Tag.objects.filter(alias__in=aliases).values_list("alias", "title"))
    for result in results:
        if result["path"]:
            result["text"] = PATH_SEPARATOR.join(
                titles.get(alias, alias) for alias in result["path"].split(PATH_SEPARATOR)
            )
    return results


def _is_numeric_token(token: Any) -> bool:
    if isinstance(token, bool):
        return False
    if isinstance(token, int):
        return True
    return isinstance(token, str) and token.strip().isdigit()


def tag_item(
    item_id: int,
    type_alias: str,
    is_new: bool,
    core_content_id: int,
    tags: list[TagToken],
    replace: bool = True,
    user: UserType | None = None,
) -> TagItemResult:
    """
    Sets the tags of a content item.

    tags: tag ids, or text of tags that may not exist yet. Text is matched
        against tag titles (after removing the NEW_TAG_MARKER prefix) and a
        new tag is created when nothing matches.
    is_new: the item has just been created, so it has no mappings yet.
    replace: when False (and the item isn't new), the tags the item already
        has, as far as `user` can see them, are kept as well.

    Returns a TagItemResult, which is falsy if there was nothing to apply; in
    that case the item's mappings are left alone. Tags that can't be resolved
    are dropped from the set and reported in the result instead of failing the
    whole call. Raises ContentTypeNotFound if the type alias isn't registered
    and PersistenceError if the mappings can't be written.
    """
    if not isinstance(tags, (list, tuple)):
        raise TagValidationError(_("Tags must be a list, not {type}.").format(type=type(tags).__name__))

    result = TagItemResult()
    if not tags:
        return result

    content_type = content_types.resolve_type(type_alias)

    requested: list[Any] = list(tags)
    if not replace and not is_new:
        requested.extend(
            get_item_tags(type_alias, item_id, include_tag_data=False, user=user).values_list("tag_id", flat=True)
        )

    numeric_ids = [int(token) for token in requested if _is_numeric_token(token)]
    known_ids = set(
        Tag.objects.filter(id__in=numeric_ids).exclude(parent=None).values_list("id", flat=True)
    )
    marker = get_setting("NEW_TAG_MARKER")
    language = ALL_LANGUAGES
    access = get_setting("DEFAULT_ACCESS")

    tag_ids: list[int] = []
    for token in requested:
        if _is_numeric_token(token):
            tag_id = int(token)
            if tag_id in known_ids:
                result.resolutions.append(TagResolution(token=token, status=APPLIED, tag_id=tag_id))
                tag_ids.append(tag_id)
            else:
                log.warning(f"Dropping unknown tag id {tag_id} for {type_alias}:{item_id}")
                result.resolutions.append(
                    TagResolution(token=token, status=SKIPPED, error=str(TagNotFound(tag_id)))
                )
            continue

        if not isinstance(token, str) or not token.replace(marker, "").strip():
            log.warning(f"Dropping malformed tag {token!r} for {type_alias}:{item_id}")
            result.resolutions.append(
                TagResolution(token=token, status=SKIPPED, error=_("Malformed tag: {token!r}").format(token=token))
            )
            continue

        try:
            tag_id, created = _find_or_create_tag(token.replace(marker, ""), language, access)
        except (TagValidationError, PersistenceError) as e:
            log.warning(f"Dropping tag {token!r} for {type_alias}:{item_id}: {e}")
            result.resolutions.append(TagResolution(token=token, status=SKIPPED, error=str(e)))
            continue
        result.resolutions.append(TagResolution(token=token, status=CREATED if created else APPLIED, tag_id=tag_id))
        tag_ids.append(tag_id)

    tag_ids = list(dict.fromkeys(tag_ids))  # Remove duplicates preserving order
    if not tag_ids:
        return result

    now = timezone.now()
    new_maps = [
        ContentItemTagMap(
            type_alias=type_alias,
            content_item_id=item_id,
            tag_id=tag_id,
            core_content_id=core_content_id,
            content_type_id=content_type.type_id,
            tag_date=now,
        )
        for tag_id in tag_ids
    ]
    # Replace all the mappings at once to avoid a window where the item has no tags
    with transaction.atomic():
        if not is_new:
            untag_item(item_id, type_alias)
        try:
            ContentItemTagMap.objects.bulk_create(new_maps)
        except DatabaseError as e:
            raise PersistenceError(
                _("Cannot tag {type_alias}:{item_id}: {error}").format(type_alias=type_alias, item_id=item_id, error=e)
            ) from e

    result.tag_ids = tag_ids
    return result


def untag_item(item_id: int, type_alias: str) -> int:
    """
    Deletes all the mappings of the given item. Returns how many were deleted.
    """
    try:
        deleted, _counts = ContentItemTagMap.objects.filter(
            type_alias=type_alias, content_item_id=item_id,
        ).delete()
    except DatabaseError as e:
        raise PersistenceError(
            _("Cannot untag {type_alias}:{item_id}: {error}").format(type_alias=type_alias, item_id=item_id, error=e)
        ) from e
    return deleted


def get_item_tags(
    type_alias: str,
    item_id: int,
    include_tag_data: bool = True,
    user: UserType | None = None,
    language: str | None = None,
) -> QuerySet[ContentItemTagMap]:
    """
    Returns a QuerySet of the mappings of the given item, in tag tree order.

    Only published tags that `user` is allowed to view are included, so the
    result depends on who is asking. Mappings to deleted tags are never
    included.

    language: "all", "current" or a language code. Defaults to the
    TAG_LIST_LANGUAGE_FILTER setting.

    With include_tag_data, each mapping's `tag` is loaded in the same query.
    """
    qs = ContentItemTagMap.objects.filter(
        type_alias=type_alias,
        content_item_id=item_id,
        tag__published=PublishedState.PUBLISHED,
        tag__access__in=get_authorised_view_levels(user),
    )
    if language is None:
        language = get_setting("TAG_LIST_LANGUAGE_FILTER")
    language_code = resolve_language_filter(language)
    if language_code:
        qs = qs.filter(tag__language__in=[language_code, ALL_LANGUAGES])
    if include_tag_data:
        qs = qs.select_related("tag")
    return qs.order_by("tag__lft")


def _split_ids(ids: ItemIds) -> list[int]:
    if isinstance(ids, (int, str)):
        ids = str(ids).split(TAGS_SEPARATOR)
    item_ids = []
    for value in ids:
        text = str(value).strip()
        if not text:
            continue
        if not text.isdigit():
            raise TagValidationError(_("Invalid item id: {value!r}").format(value=value))
        item_ids.append(int(text))
    return item_ids


def get_tag_ids(item_ids: ItemIds, type_alias: str) -> str | None:
    """
    Returns the ids of the tags of one or more items, joined by commas.

    Meant for prefetching: unlike get_item_tags(), tags are not filtered by
    state, access or language. Returns None if no item ids are given, and
    raises TagValidationError for ids that aren't numbers.
    """
    if not item_ids:
        return None
    tag_ids = (
        Tag.objects
        .filter(tag_maps__type_alias=type_alias, tag_maps__content_item_id__in=_split_ids(item_ids))
        .order_by("tag_maps__id")
        .values_list("id", flat=True)
    )
    return TAGS_SEPARATOR.join(str(tag_id) for tag_id in tag_ids)


def delete_core_content(content_item_ids: Iterable[int], type_alias: str) -> int:
    """
    Deletes the generic content records of the given items.
    """
    deleted, _counts = CoreContent.objects.filter(
        core_type_alias=type_alias,
        core_content_item_id__in=list(content_item_ids),
    ).delete()
    return deleted


def delete_tag_data(content_item_ids: Iterable[int], type_alias: str) -> None:
    """
    Deletes the mappings and the generic content records of the given items.
    """
    content_item_ids = list(content_item_ids)
    with transaction.atomic():
        for content_item_id in content_item_ids:
            untag_item(content_item_id, type_alias)
        try:
            delete_core_content(content_item_ids, type_alias)
        except DatabaseError as e:
            raise PersistenceError(
                _("Cannot delete content records of {type_alias}: {error}").format(type_alias=type_alias, error=e)
            ) from e
