"""
Content tagging base data models
"""
from __future__ import annotations

import logging
from typing import List

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from content_tagging.lib.fields import MultiCollationTextField, case_insensitive_char_field, case_sensitive_char_field

from .utils import PATH_SEPARATOR, RESERVED_TAG_CHARS

log = logging.getLogger(__name__)

# Titles of a tag and its ancestors, starting below the root.
Lineage = List[str]

# Language value meaning "any language".
ALL_LANGUAGES = "*"


class PublishedState(models.IntegerChoices):
    """
    Publication state shared by tags and generic content records.
    """
    TRASHED = -2, _("Trashed")
    UNPUBLISHED = 0, _("Unpublished")
    PUBLISHED = 1, _("Published")
    ARCHIVED = 2, _("Archived")


class ViewLevel(models.IntegerChoices):
    """
    The access (view) levels known out of the box. Projects may use other ids.
    """
    PUBLIC = 1, _("Public")
    REGISTERED = 2, _("Registered")
    SPECIAL = 3, _("Special")
    GUEST = 5, _("Guest")
    SUPER_USERS = 6, _("Super Users")


class Tag(models.Model):
    """
    A node in the single, shared tree of tags.

    The tree is stored as a nested set: every tag has ``lft`` and ``rgt``
    boundaries, and all of its descendants have boundaries strictly between
    them. That turns "this tag and everything below it" into one range query.
    The boundaries, ``level`` and ``path`` are owned by TagTree; never edit
    them by hand.

    There is exactly one root tag (parent=None, lft=0). It is never shown and
    never applied to content.
    """

    id = models.BigAutoField(primary_key=True)
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        default=None,
        on_delete=models.CASCADE,
        related_name="children",
        help_text=_(
            "Tag that lives one level up from the current tag. Only the root tag has no parent."
        ),
    )
    lft = models.PositiveIntegerField(
        default=0,
        editable=False,
        help_text=_("Left boundary of this tag's subtree in the nested set."),
    )
    rgt = models.PositiveIntegerField(
        default=0,
        editable=False,
        help_text=_("Right boundary of this tag's subtree in the nested set."),
    )
    level = models.PositiveIntegerField(
        default=0,
        editable=False,
        help_text=_("Depth of this tag; the root is at level 0."),
    )
    path = case_insensitive_char_field(
        max_length=400,
        blank=True,
        default="",
        editable=False,
        help_text=_("Aliases of the ancestors of this tag and of the tag itself, joined by '/'. Excludes the root."),
    )
    title = case_sensitive_char_field(
        max_length=255,
        db_index=True,
        help_text=_("Human readable name of the tag. Lookups by title are exact and case-sensitive."),
    )
    alias = case_insensitive_char_field(
        max_length=400,
        unique=True,
        help_text=_("URL-safe identifier of the tag, used as a path segment. Unique across the whole tree."),
    )
    description = MultiCollationTextField(
        blank=True,
        default="",
    )
    published = models.SmallIntegerField(
        choices=PublishedState.choices,
        default=PublishedState.PUBLISHED,
    )
    access = models.PositiveIntegerField(
        default=ViewLevel.PUBLIC,
        help_text=_("View level required to see this tag."),
    )
    language = models.CharField(
        max_length=7,
        default=ALL_LANGUAGES,
        help_text=_("Language code of the tag, or '*' for all languages."),
    )
    created = models.DateTimeField(default=timezone.now, editable=False)
    modified = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["lft", "rgt"], name="ct_tag_lft_rgt_idx"),
            models.Index(fields=["published", "access"], name="ct_tag_pub_access_idx"),
            models.Index(fields=["language"], name="ct_tag_language_idx"),
        ]

    def __repr__(self):
        """
        Developer-facing representation of a Tag.
        """
        return str(self)

    def __str__(self):
        """
        User-facing string representation of a Tag.
        """
        return f"<{self.__class__.__name__}> ({self.id}) {self.title}"

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    @property
    def is_leaf(self) -> bool:
        """
        True if this tag has no children. Relies on up-to-date lft/rgt values.
        """
        return self.rgt == self.lft + 1

    def get_descendants(self, include_self: bool = True) -> models.QuerySet[Tag]:
        """
        Returns a QuerySet of this tag's subtree, in tree order.
        """
        if include_self:
            qs = Tag.objects.filter(lft__gte=self.lft, rgt__lte=self.rgt)
        else:
            qs = Tag.objects.filter(lft__gt=self.lft, rgt__lt=self.rgt)
        return qs.order_by("lft")

    def get_ancestors(self, include_root: bool = False) -> models.QuerySet[Tag]:
        """
        Returns a QuerySet of the tags above this one, starting from the top.
        """
        qs = Tag.objects.filter(lft__lt=self.lft, rgt__gt=self.rgt)
        if not include_root:
            qs = qs.exclude(parent=None)
        return qs.order_by("lft")

    def get_lineage(self) -> Lineage:
        """
        Returns the titles of this tag's ancestors (root excluded) followed by its own title.
        """
        if self.is_root:
            return []
        lineage: Lineage = list(self.get_ancestors().values_list("title", flat=True))
        lineage.append(self.title)
        return lineage

    def clean(self):
        """
        Validate this tag before saving
        """
        # Don't allow leading or trailing whitespace:
        self.title = self.title.strip()
        self.alias = self.alias.strip()

        if not self.title:
            raise ValidationError("Tags must have a title.")

        for reserved_char in RESERVED_TAG_CHARS:
            if reserved_char in self.title:
                raise ValidationError(f"Tags cannot contain a '{reserved_char}' character.")

        if PATH_SEPARATOR in self.alias:
            raise ValidationError(f"Tag aliases cannot contain a '{PATH_SEPARATOR}' character.")


class ContentItemType(models.Model):
    """
    A kind of content that can be tagged, e.g. articles or contacts.

    ``type_alias`` is the polymorphic discriminator stored on every mapping row.
    It is a dot separated "component.view" pair, e.g. "com_content.article".
    """

    id = models.BigAutoField(primary_key=True)
    type_title = models.CharField(max_length=255)
    type_alias = case_insensitive_char_field(
        max_length=400,
        unique=True,
        help_text=_("Dot separated component and view, e.g. 'com_content.article'."),
    )
    table = models.CharField(
        max_length=255,
        help_text=_("Name of the table that stores items of this type."),
    )
    router = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text=_("Reference to the function that builds URLs for items of this type."),
    )

    def __repr__(self):
        return str(self)

    def __str__(self):
        return f"<{self.__class__.__name__}> ({self.id}) {self.type_alias}"

    @property
    def type_id(self) -> int:
        return self.id


class CoreContent(models.Model):
    """
    Denormalized copy of any taggable item, whatever its type.

    The content subsystem writes these records; the tagging app only reads them
    to list the items behind a set of tags, and deletes them together with an
    item's tag data.
    """

    core_content_id = models.BigAutoField(primary_key=True)
    core_type_alias = case_insensitive_char_field(max_length=400, db_index=True)
    core_content_item_id = models.PositiveBigIntegerField(
        default=0,
        help_text=_("Primary key of the item in the table of its own type."),
    )
    core_title = models.CharField(max_length=255)
    core_alias = models.CharField(max_length=400, blank=True, default="")
    core_body = MultiCollationTextField(blank=True, default="")
    core_state = models.SmallIntegerField(choices=PublishedState.choices, default=PublishedState.UNPUBLISHED)
    core_access = models.PositiveIntegerField(default=ViewLevel.PUBLIC)
    core_metadata = models.TextField(
        blank=True,
        default="",
        help_text=_("JSON encoded metadata of the item, including its inline tags."),
    )
    core_created_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        default=None,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="+",
    )
    core_created_by_alias = models.CharField(max_length=255, blank=True, default="")
    core_created_time = models.DateTimeField(default=timezone.now)
    core_modified_time = models.DateTimeField(null=True, blank=True, default=None)
    core_language = models.CharField(max_length=7, default=ALL_LANGUAGES)
    core_catid = models.PositiveIntegerField(default=0)
    core_images = models.TextField(blank=True, default="")
    core_publish_up = models.DateTimeField(null=True, blank=True, default=None)
    core_publish_down = models.DateTimeField(null=True, blank=True, default=None)

    class Meta:
        indexes = [
            models.Index(fields=["core_type_alias", "core_content_item_id"], name="ct_core_type_item_idx"),
        ]

    def __repr__(self):
        return str(self)

    def __str__(self):
        return f"<{self.__class__.__name__}> ({self.core_content_id}) {self.core_type_alias}: {self.core_title}"


class ContentItemTagMap(models.Model):
    """
    Represents one tag applied to one content item of some type.

    An item is identified by its type alias plus its id within that type, so
    the same mapping table serves articles, contacts, and anything else that
    has been registered as a ContentItemType.

    Deleting a Tag does not touch these rows: the tagging API removes them
    explicitly first. Rows pointing to a missing tag are ignored by every read,
    since reads always join to the tag table.
    """

    id = models.BigAutoField(primary_key=True)
    type_alias = case_insensitive_char_field(
        max_length=400,
        help_text=_("Type alias of the tagged item, e.g. 'com_content.article'."),
    )
    content_item_id = models.PositiveBigIntegerField(
        help_text=_("Primary key of the tagged item in the table of its type."),
    )
    tag = models.ForeignKey(
        Tag,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="tag_maps",
    )
    core_content = models.ForeignKey(
        CoreContent,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="tag_maps",
        help_text=_("Generic content record of the tagged item."),
    )
    content_type = models.ForeignKey(
        ContentItemType,
        on_delete=models.PROTECT,
        db_column="type_id",
        related_name="tag_maps",
    )
    tag_date = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=["type_alias", "content_item_id"], name="ct_map_type_item_idx"),
        ]
        unique_together = [
            ("type_alias", "content_item_id", "tag"),
        ]

    def __repr__(self):
        """
        Developer-facing representation of a ContentItemTagMap.
        """
        return str(self)

    def __str__(self):
        """
        User-facing string representation of a ContentItemTagMap.
        """
        return f"<{self.__class__.__name__}> {self.type_alias}:{self.content_item_id} -> {self.tag_id}"
