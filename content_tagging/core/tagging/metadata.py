"""
Tags stored inline in the JSON metadata of content items.

Editors save an item's tags into its metadata as a single comma separated
``tags`` field that mixes tag ids with the text of tags that don't exist yet.
These helpers turn that field into something displayable. They work on the
decoded metadata dict and rewrite its ``tags`` field in place; use
load_metadata() and dump_metadata() to go from and to the stored blob.
"""
from __future__ import annotations

import json
from typing import Any, Dict

from .conf import get_setting
from .models import Tag
from .models.utils import TAGS_SEPARATOR

Metadata = Dict[str, Any]

TAGS_FIELD = "tags"


def load_metadata(blob: str | None) -> Metadata:
    """
    Decodes a stored metadata blob. Empty blobs decode to an empty dict.
    """
    if not blob:
        return {}
    return json.loads(blob)


def dump_metadata(metadata: Metadata) -> str:
    return json.dumps(metadata)


def _get_tokens(metadata: Metadata) -> list[str]:
    """
    Returns the entries of the metadata's tags field, which may be a list or a comma separated string.
    """
    tags = metadata.get(TAGS_FIELD)
    if not tags:
        return []
    if isinstance(tags, str):
        return tags.split(TAGS_SEPARATOR)
    return [str(tag) for tag in tags]


def set_meta_tag_names(metadata: Metadata, names: list[str]) -> Metadata:
    metadata[TAGS_FIELD] = TAGS_SEPARATOR.join(names)
    return metadata


def get_meta_tag_names(metadata: Metadata) -> list[str]:
    """
    Resolves the tag ids in the metadata's tags field to tag titles.

    Returns the text entries first, in their original order, followed by the
    titles of the numeric entries. Ids of tags that don't exist are dropped.
    The tags field is rewritten to the same list of names.
    """
    names = []
    tag_ids = []
    for token in _get_tokens(metadata):
        if token.strip().isdigit():
            tag_ids.append(int(token))
        else:
            names.append(token)

    if tag_ids:
        titles = dict(Tag.objects.filter(id__in=tag_ids).values_list("id", "title"))
        names.extend(titles[tag_id] for tag_id in dict.fromkeys(tag_ids) if tag_id in titles)

    set_meta_tag_names(metadata, names)
    return names


def convert_tags_metadata(metadata: Metadata) -> list[str]:
    """
    Removes the "new tag" marker from each entry of the metadata's tags field.

    Returns the cleaned entries; a tags field holding only an empty string
    gives an empty list. The tags field is rewritten with the cleaned entries.
    """
    marker = get_setting("NEW_TAG_MARKER")
    tokens = [token.replace(marker, "") for token in _get_tokens(metadata)]
    if tokens:
        set_meta_tag_names(metadata, tokens)
    if tokens == [""]:
        return []
    return tokens
