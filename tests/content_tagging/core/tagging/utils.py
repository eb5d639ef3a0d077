"""
Useful utilities for testing tagging code.
"""
from __future__ import annotations

from content_tagging.core.tagging.models import Tag


def pretty_format_tree() -> list[str]:
    """
    Format the whole tag tree to be more human readable, one line per tag:

        "  Title [lft, rgt] path"

    Indentation follows the level, so a broken nested set is easy to spot in a diff.
    """
    return [
        f"{'  ' * tag.level}{tag.title} [{tag.lft}, {tag.rgt}] {tag.path}".rstrip()
        for tag in Tag.objects.order_by("lft")
    ]
