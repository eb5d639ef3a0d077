"""
Test the registry of taggable content types
"""
from __future__ import annotations

import ddt  # type: ignore[import]

from content_tagging.core.tagging import content_types
from content_tagging.core.tagging.exceptions import ContentTypeNotFound, TagValidationError
from content_tagging.core.tagging.models import ContentItemType
from content_tagging.lib.test_utils import TestCase


class TestContentTypesMixin:
    """
    Registers the content types used by the tagging tests.
    """

    def setUp(self):
        super().setUp()
        self.article_type = content_types.register_type(
            "com_content.article", "Article", "content", router="ContentHelperRoute::getArticleRoute",
        )
        self.contact_type = content_types.register_type("com_contact.contact", "Contact", "contact_details")
        self.category_type = content_types.register_type("com_content.category", "Article Category", "categories")


@ddt.ddt
class TestContentTypes(TestContentTypesMixin, TestCase):
    """
    Test the content type registry functions.
    """

    def test_resolve_type(self):
        info = content_types.resolve_type("com_content.article")
        assert info == self.article_type
        assert info.type_alias == "com_content.article"
        assert info.table == "content"
        assert info.title == "Article"
        assert info.router == "ContentHelperRoute::getArticleRoute"
        assert info.type_id == ContentItemType.objects.get(type_alias="com_content.article").id

    def test_resolve_type_is_cached(self):
        content_types.resolve_type("com_contact.contact")
        with self.assertNumQueries(0):
            assert content_types.get_type_id("com_contact.contact") == self.contact_type.type_id
            assert content_types.get_table_name("com_contact.contact") == "contact_details"

    def test_resolve_unknown_type(self):
        with self.assertRaises(ContentTypeNotFound) as exc:
            content_types.resolve_type("com_nothing.thing")
        assert exc.exception.type_alias == "com_nothing.thing"
        assert str(exc.exception) == "Content type 'com_nothing.thing' is not registered"

    def test_register_updates(self):
        content_types.resolve_type("com_contact.contact")
        updated = content_types.register_type("com_contact.contact", "Contact", "contacts")
        assert updated.type_id == self.contact_type.type_id
        # Registration throws the cached descriptor away
        assert content_types.get_table_name("com_contact.contact") == "contacts"
        assert ContentItemType.objects.count() == 3

    @ddt.data("com_content", "com_content.", ".article", "a.b.c")
    def test_register_invalid_alias(self, type_alias):
        with self.assertRaises(TagValidationError):
            content_types.register_type(type_alias, "Bad", "bad")

    def test_explode_type_alias(self):
        assert content_types.explode_type_alias("com_content.article") == ["com_content", "article"]

    def test_list_types(self):
        assert list(content_types.list_types().values_list("type_alias", flat=True)) == [
            "com_content.article",
            "com_contact.contact",
            "com_content.category",
        ]

    @ddt.data(
        ["com_content.article", "com_content.category"],
        "com_content.article,com_content.category",
    )
    def test_list_types_by_alias(self, select_types):
        result = content_types.list_types(select_types)
        assert [info.type_alias for info in result] == ["com_content.article", "com_content.category"]

    def test_list_types_by_id(self):
        result = content_types.list_types([self.contact_type.type_id], use_alias=False)
        assert [info.type_alias for info in result] == ["com_contact.contact"]
        result = content_types.list_types(str(self.category_type.type_id), use_alias=False)
        assert [info.type_alias for info in result] == ["com_content.category"]

    def test_list_types_mixed(self):
        result = content_types.list_types([self.category_type.type_id, "com_contact.contact"], use_alias=None)
        assert [info.type_alias for info in result] == ["com_contact.contact", "com_content.category"]

    def test_list_types_unknown(self):
        assert not content_types.list_types(["com_nothing.thing"]).exists()
