"""
Nested set maintenance for the tag tree.

All structural changes to Tag rows (lft, rgt, level, path and parent) go
through TagTree. Each change runs in its own transaction and locks the tag rows
first, so readers never see a half-shifted range once the change is committed.
"""
from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import F
from django.utils.translation import gettext as _

from ..exceptions import TagNotFound, TagValidationError
from .base import Tag
from .utils import PATH_SEPARATOR

log = logging.getLogger(__name__)

ROOT_ALIAS = "root"
ROOT_TITLE = "ROOT"

FIRST_CHILD = "first-child"
LAST_CHILD = "last-child"
BEFORE = "before"
AFTER = "after"
POSITIONS = (FIRST_CHILD, LAST_CHILD, BEFORE, AFTER)


class TagTree:
    """
    Read and restructure the nested set of tags.

    Read operations never raise for unknown ids: is_leaf() answers False and
    descendants() answers an empty list, since "no such tag" simply means
    nothing matches. Write operations raise TagNotFound instead.
    """

    def get_root(self) -> Tag:
        """
        Returns the root tag, creating it if the tree is still empty.
        """
        root = Tag.objects.filter(parent=None).order_by("lft", "id").first()
        if root is None:
            root, created = Tag.objects.get_or_create(
                alias=ROOT_ALIAS,
                defaults={
                    "title": ROOT_TITLE,
                    "lft": 0,
                    "rgt": 1,
                    "level": 0,
                    "path": "",
                },
            )
            if created:
                log.info(f"Created root tag {root.pk}")
        return root

    def get_root_id(self) -> int:
        return self.get_root().pk

    def is_leaf(self, tag_id: int) -> bool:
        """
        True if the tag exists and has no children.
        """
        bounds = Tag.objects.filter(pk=tag_id).values("lft", "rgt").first()
        if bounds is None:
            return False
        return bounds["rgt"] == bounds["lft"] + 1

    def descendants(self, tag_id: int) -> list[int]:
        """
        Returns the ids of the tag's subtree, the tag itself first, in tree order.

        Leaf tags answer [tag_id] without a range query. Unknown ids answer [].
        """
        node = Tag.objects.filter(pk=tag_id).only("id", "lft", "rgt").first()
        if node is None:
            return []
        if node.is_leaf:
            return [node.pk]
        return list(node.get_descendants().values_list("id", flat=True))

    def ancestors(self, tag_id: int) -> list[int]:
        """
        Returns the ids of the tags above the given one, root excluded, top first.
        """
        node = Tag.objects.filter(pk=tag_id).only("id", "lft", "rgt", "parent_id").first()
        if node is None:
            return []
        return list(node.get_ancestors().values_list("id", flat=True))

    def insert(self, tag: Tag, anchor_id: int | None = None, position: str = LAST_CHILD) -> Tag:
        """
        Saves a new tag into the tree, relative to the anchor tag.

        With no anchor the tag becomes a child of the root. Room is made by
        shifting every boundary at or after the insertion point by two.
        """
        self._check_position(position)
        if tag.pk is not None:
            raise TagValidationError(_("Only new tags can be inserted; use set_location() to move {tag}").format(tag=tag))

        with transaction.atomic():
            root_id = self.get_root_id()
            # Boundaries must be read after locking, another insert may have shifted them
            self._lock()
            anchor = Tag.objects.select_related("parent").filter(
                pk=root_id if anchor_id is None else anchor_id,
            ).first()
            if anchor is None:
                raise TagNotFound(anchor_id)
            if anchor.is_root and position in (BEFORE, AFTER):
                raise TagValidationError(_("Tags cannot be placed next to the root tag."))

            if position == FIRST_CHILD:
                point, parent = anchor.lft + 1, anchor
            elif position == LAST_CHILD:
                point, parent = anchor.rgt, anchor
            elif position == BEFORE:
                point, parent = anchor.lft, anchor.parent
            else:
                point, parent = anchor.rgt + 1, anchor.parent

            Tag.objects.filter(rgt__gte=point).update(rgt=F("rgt") + 2)
            Tag.objects.filter(lft__gte=point).update(lft=F("lft") + 2)

            tag.parent = parent
            tag.lft = point
            tag.rgt = point + 1
            tag.level = parent.level + 1
            tag.path = self._child_path(parent, tag.alias)
            tag.save()

        return tag

    def set_location(self, tag_id: int, anchor_id: int, position: str = LAST_CHILD) -> int:
        """
        Moves the tag, with its whole subtree, relative to the anchor tag.

        position is one of "first-child" or "last-child" (of the anchor), or
        "before" or "after" (the anchor, as its sibling).

        The tree is renumbered from the root, and every row whose lft, rgt,
        level, path or parent changed is written back. Returns how many rows
        were updated.
        """
        self._check_position(position)

        with transaction.atomic():
            nodes = list(
                Tag.objects.select_for_update()
                .only("id", "parent_id", "lft", "rgt", "level", "path", "alias")
                .order_by("lft", "id")
            )
            nodes_by_id = {node.pk: node for node in nodes}
            node = nodes_by_id.get(int(tag_id))
            if node is None:
                raise TagNotFound(tag_id)
            anchor = nodes_by_id.get(int(anchor_id))
            if anchor is None:
                raise TagNotFound(anchor_id)

            if node.is_root:
                raise TagValidationError(_("The root tag cannot be moved."))
            if node.lft <= anchor.lft <= node.rgt:
                raise TagValidationError(
                    _("Cannot move {tag} into its own subtree.").format(tag=node.pk)
                )
            if anchor.is_root and position in (BEFORE, AFTER):
                raise TagValidationError(_("Tags cannot be placed next to the root tag."))

            children = self._children_map(nodes)
            children[node.parent_id].remove(node.pk)

            if position in (FIRST_CHILD, LAST_CHILD):
                new_parent_id = anchor.pk
                siblings = children.setdefault(new_parent_id, [])
                index = 0 if position == FIRST_CHILD else len(siblings)
            else:
                new_parent_id = anchor.parent_id
                siblings = children[new_parent_id]
                index = siblings.index(anchor.pk) + (1 if position == AFTER else 0)
            siblings.insert(index, node.pk)
            node.parent_id = new_parent_id

            updated = self._renumber(nodes_by_id, children)

        log.info(f"Moved tag {tag_id} {position} {anchor_id}; {updated} tags renumbered")
        return updated

    def rebuild(self) -> int:
        """
        Recomputes lft, rgt, level and path of every tag from the parent links.

        Siblings keep their current order. Returns how many rows were updated.
        """
        self.get_root()
        with transaction.atomic():
            nodes = list(
                Tag.objects.select_for_update()
                .only("id", "parent_id", "lft", "rgt", "level", "path", "alias")
                .order_by("lft", "id")
            )
            updated = self._renumber({node.pk: node for node in nodes}, self._children_map(nodes))
        if updated:
            log.info(f"Rebuilt the tag tree; {updated} tags renumbered")
        return updated

    def remove(self, tag_id: int, with_subtags: bool = False) -> int:
        """
        Deletes the tag from the tree and closes the gap it leaves.

        A tag with children is only removed when with_subtags is True, in which
        case the whole subtree goes. Mapping rows are not touched here; use the
        tagging API to delete a tag together with its mappings.

        Returns how many tags were deleted.
        """
        with transaction.atomic():
            self._lock()
            node = Tag.objects.filter(pk=tag_id).first()
            if node is None:
                raise TagNotFound(tag_id)
            if node.is_root:
                raise TagValidationError(_("The root tag cannot be deleted."))
            if not node.is_leaf and not with_subtags:
                raise TagValidationError(
                    _("Tag {tag} has children; `with_subtags` must be True to delete it.").format(tag=node.pk)
                )

            width = node.rgt - node.lft + 1
            subtree = Tag.objects.filter(lft__gte=node.lft, rgt__lte=node.rgt)
            count = subtree.count()
            subtree.delete()
            Tag.objects.filter(rgt__gt=node.rgt).update(rgt=F("rgt") - width)
            Tag.objects.filter(lft__gt=node.rgt).update(lft=F("lft") - width)

        log.info(f"Removed tag {tag_id} and {count - 1} descendants from the tree")
        return count

    @staticmethod
    def _check_position(position: str):
        if position not in POSITIONS:
            raise TagValidationError(
                _("Invalid position '{position}'; expected one of {positions}.").format(
                    position=position, positions=", ".join(POSITIONS),
                )
            )

    @staticmethod
    def _lock():
        """
        Lock every tag row until the end of the current transaction.
        """
        list(Tag.objects.select_for_update().values_list("id", flat=True))

    @staticmethod
    def _child_path(parent: Tag, alias: str) -> str:
        if parent.is_root:
            return alias
        return f"{parent.path}{PATH_SEPARATOR}{alias}"

    @staticmethod
    def _children_map(nodes: list[Tag]) -> dict[int | None, list[int]]:
        """
        Maps each parent id to its children's ids. ``nodes`` must be in lft order.
        """
        children: dict[int | None, list[int]] = {}
        for node in nodes:
            children.setdefault(node.parent_id, []).append(node.pk)
        return children

    def _renumber(self, nodes_by_id: dict[int, Tag], children: dict[int | None, list[int]]) -> int:
        """
        Walks the tree depth first, assigning fresh nested set values, and saves the changed rows.
        """
        roots = children.get(None, [])
        if len(roots) != 1:
            raise TagValidationError(_("The tag tree must have exactly one root, found {count}.").format(count=len(roots)))

        fields = ("parent_id", "lft", "rgt", "level", "path")
        before = {pk: tuple(getattr(node, f) for f in fields) for pk, node in nodes_by_id.items()}

        counter = 0
        stack: list[tuple[Tag, bool]] = [(nodes_by_id[roots[0]], False)]
        while stack:
            node, visited = stack.pop()
            if visited:
                node.rgt = counter
                counter += 1
                continue
            parent = nodes_by_id.get(node.parent_id) if node.parent_id is not None else None
            node.lft = counter
            counter += 1
            node.level = parent.level + 1 if parent else 0
            node.path = self._child_path(parent, node.alias) if parent else ""
            stack.append((node, True))
            for child_id in reversed(children.get(node.pk, [])):
                stack.append((nodes_by_id[child_id], False))

        changed = [
            node for pk, node in nodes_by_id.items()
            if tuple(getattr(node, f) for f in fields) != before[pk]
        ]
        if changed:
            Tag.objects.bulk_update(changed, ["parent", "lft", "rgt", "level", "path"])
        return len(changed)
