"""
Test the query for the content items behind a set of tags
"""
from __future__ import annotations

from datetime import timedelta

import ddt  # type: ignore[import]
from django.contrib.auth import get_user_model
from django.utils import timezone

import content_tagging.core.tagging.api as tagging_api
from content_tagging.core.tagging.exceptions import TagValidationError
from content_tagging.core.tagging.models import CoreContent, PublishedState, ViewLevel
from content_tagging.core.tagging.query import get_tag_items_query
from content_tagging.lib.test_utils import TestCase

from .test_content_types import TestContentTypesMixin
from .test_models import TestTagTreeMixin

User = get_user_model()

ARTICLE = "com_content.article"
CONTACT = "com_contact.contact"


def titles(rows) -> list[str]:
    return [row["core_title"] for row in rows]


@ddt.ddt
class TestTagItemsQuery(TestContentTypesMixin, TestTagTreeMixin, TestCase):
    """
    Test listing tagged items across content types.
    """

    def setUp(self):
        super().setUp()
        self.learner = User.objects.create(username="learner", email="learner@example.com")
        self.staff = User.objects.create(username="staff", email="staff@example.com", is_staff=True)
        self.now = timezone.now()

        self.add_item(ARTICLE, 1, "Banana", [self.cats, self.birds],
                      core_created_by_alias="Ghost Writer", core_modified_time=self.now + timedelta(days=1))
        self.add_item(ARTICLE, 2, "Apple", [self.cats], core_created_user=self.learner)
        self.add_item(ARTICLE, 3, "Cherry", [self.birds], core_state=PublishedState.UNPUBLISHED)
        self.add_item(ARTICLE, 4, "Damson", [self.cats], core_state=PublishedState.TRASHED)
        self.add_item(ARTICLE, 5, "Elder", [self.cats], core_access=ViewLevel.SPECIAL)
        self.add_item(ARTICLE, 6, "Fig", [self.cats], core_language="fr-fr")
        self.contact = self.add_item(CONTACT, 1, "Zed", [self.cats, self.fungi])
        # A mapping pointing to the content record of another type is never listed
        tagging_api.tag_item(7, ARTICLE, True, self.contact.pk, [self.cats.pk])

    def add_item(self, type_alias: str, item_id: int, title: str, tags: list, **kwargs) -> CoreContent:
        """
        Creates the content record of an item and tags it.
        """
        kwargs.setdefault("core_state", PublishedState.PUBLISHED)
        kwargs.setdefault("core_created_time", self.now)
        core_content = CoreContent.objects.create(
            core_type_alias=type_alias,
            core_content_item_id=item_id,
            core_title=title,
            **kwargs,
        )
        tagging_api.tag_item(item_id, type_alias, True, core_content.pk, [tag.pk for tag in tags])
        return core_content

    def test_single_tag(self):
        assert titles(get_tag_items_query([self.cats.pk])) == ["Apple", "Banana", "Fig", "Zed"]

    def test_query_is_lazy(self):
        with self.assertNumQueries(0):
            qs = get_tag_items_query([self.cats.pk, self.birds.pk], type_filter=[ARTICLE], match_any=False)
        with self.assertNumQueries(1):
            assert titles(qs) == ["Banana"]

    def test_match_any(self):
        rows = list(get_tag_items_query(f"{self.cats.pk},{self.birds.pk}"))
        assert titles(rows) == ["Apple", "Banana", "Cherry", "Fig", "Zed"]
        match_counts = {row["core_title"]: row["match_count"] for row in rows}
        assert match_counts == {"Apple": 1, "Banana": 2, "Cherry": 1, "Fig": 1, "Zed": 1}

    def test_match_all(self):
        rows = list(get_tag_items_query([self.cats.pk, self.birds.pk], match_any=False))
        assert titles(rows) == ["Banana"]
        assert rows[0]["match_count"] == 2
        assert titles(get_tag_items_query([self.cats.pk, self.fungi.pk], match_any=False)) == ["Zed"]

    def test_match_all_duplicate_ids(self):
        # Repeating a tag doesn't make it count twice
        rows = get_tag_items_query([self.birds.pk, self.birds.pk], match_any=False)
        assert titles(rows) == ["Banana", "Cherry"]

    def test_match_all_single_tag(self):
        assert titles(get_tag_items_query([self.birds.pk], match_any=False)) == ["Banana", "Cherry"]

    @ddt.data(True, False)
    def test_include_children(self, match_any):
        rows = list(get_tag_items_query([self.animals.pk], include_children=True, match_any=match_any))
        assert titles(rows) == ["Apple", "Banana", "Cherry", "Fig", "Zed"]
        assert rows[1]["match_count"] == 2

    def test_without_children(self):
        assert not get_tag_items_query([self.animals.pk]).exists()

    @ddt.data(
        ([CONTACT], ["Zed"]),
        (CONTACT, ["Zed"]),
        ([ARTICLE, CONTACT], ["Apple", "Banana", "Fig", "Zed"]),
        (["com_nothing.thing"], []),
    )
    @ddt.unpack
    def test_type_filter(self, type_filter, expected):
        assert titles(get_tag_items_query([self.cats.pk], type_filter=type_filter)) == expected

    def test_type_filter_by_id(self):
        rows = get_tag_items_query([self.cats.pk], type_filter=[self.article_type.type_id])
        assert titles(rows) == ["Apple", "Banana", "Fig"]

    @ddt.data(
        ("all", ["Apple", "Banana", "Fig", "Zed"]),
        ("fr-fr", ["Apple", "Banana", "Fig", "Zed"]),
        ("de-de", ["Apple", "Banana", "Zed"]),
        ("current", ["Apple", "Banana", "Zed"]),
    )
    @ddt.unpack
    def test_language_filter(self, language_filter, expected):
        assert titles(get_tag_items_query([self.cats.pk], language_filter=language_filter)) == expected

    @ddt.data(
        ([PublishedState.UNPUBLISHED], ["Cherry"]),
        ("1", ["Banana"]),
        ([-2, 0, 1], ["Banana", "Cherry"]),
    )
    @ddt.unpack
    def test_state_filter(self, state_filter, expected):
        assert titles(get_tag_items_query([self.birds.pk], state_filter=state_filter)) == expected
        if state_filter == [-2, 0, 1]:
            assert "Damson" in titles(get_tag_items_query([self.cats.pk], state_filter=state_filter))

    def test_access(self):
        assert "Elder" not in titles(get_tag_items_query([self.cats.pk], user=self.learner))
        assert titles(get_tag_items_query([self.cats.pk], user=self.staff)) == ["Apple", "Banana", "Elder", "Fig", "Zed"]

    def test_ordering(self):
        assert titles(get_tag_items_query([self.cats.pk], order_dir="DESC")) == ["Zed", "Fig", "Banana", "Apple"]
        assert titles(get_tag_items_query([self.cats.pk], order_by="c.core_title", order_dir="desc")) == [
            "Zed", "Fig", "Banana", "Apple",
        ]

    def test_order_by_match_count(self):
        rows = get_tag_items_query([self.cats.pk, self.birds.pk], order_by="match_count", order_dir="DESC")
        # Ties are broken by type alias, then item id
        assert titles(rows) == ["Banana", "Zed", "Apple", "Cherry", "Fig"]

    def test_order_by_tag_date(self):
        rows = list(get_tag_items_query([self.cats.pk], order_by="tag_date"))
        # Items were tagged in creation order
        assert titles(rows) == ["Banana", "Apple", "Fig", "Zed"]

    @ddt.data(
        {"order_by": "core_title; DROP TABLE ct_tagging_tag"},
        {"order_by": "title"},
        {"order_dir": "sideways"},
    )
    def test_invalid_ordering(self, kwargs):
        with self.assertRaises(TagValidationError):
            get_tag_items_query([self.cats.pk], **kwargs)

    @ddt.data("abc", ["1", "x"])
    def test_invalid_tag_ids(self, tag_ids):
        with self.assertRaises(TagValidationError):
            get_tag_items_query(tag_ids)

    @ddt.data([], "", [99999])
    def test_no_matching_tags(self, tag_ids):
        assert list(get_tag_items_query(tag_ids)) == []

    def test_row_contents(self):
        rows = {row["core_title"]: row for row in get_tag_items_query([self.cats.pk])}
        banana = rows["Banana"]
        assert banana["type_alias"] == ARTICLE
        assert banana["content_item_id"] == 1
        assert banana["core_content_id"] == CoreContent.objects.get(core_title="Banana").pk
        assert banana["content_type_title"] == "Article"
        assert banana["router"] == "ContentHelperRoute::getArticleRoute"
        assert banana["core_state"] == PublishedState.PUBLISHED
        assert banana["core_language"] == "*"
        assert banana["latest_tag_date"] is not None
        # The byline wins over the user account
        assert banana["author"] == "Ghost Writer"
        assert banana["core_modified_time"] == self.now + timedelta(days=1)

        apple = rows["Apple"]
        assert apple["author"] == "learner"
        assert apple["author_email"] == "learner@example.com"
        assert apple["core_created_user_id"] == self.learner.pk
        # Never modified: falls back to the creation time
        assert apple["core_modified_time"] == self.now

        zed = rows["Zed"]
        assert zed["type_alias"] == CONTACT
        assert zed["content_type_title"] == "Contact"
        assert zed["author"] is None
