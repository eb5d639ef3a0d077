"""
Tests tagging rules-based permissions
"""
import ddt  # type: ignore[import]
import rules  # type: ignore[import]
from django.contrib.auth import get_user_model
from django.test.testcases import TestCase

from content_tagging.core.tagging.models import PublishedState, ViewLevel
from content_tagging.core.tagging.rules import ContentItemPermissionItem, can_change_content_item

from .test_models import TestTagTreeMixin, make_tag

User = get_user_model()


@ddt.ddt
class TestRulesTagging(TestTagTreeMixin, TestCase):
    """
    Tests that the expected rules have been applied to the tagging models.
    """

    def setUp(self):

        def _item_permission(_user, perm_obj: ContentItemPermissionItem) -> bool:
            """
            Everyone has permission on article 1
            """
            return perm_obj.type_alias == "com_content.article" and perm_obj.content_item_id == 1

        super().setUp()

        self.superuser = User.objects.create(
            username="superuser",
            email="superuser@example.com",
            is_superuser=True,
        )
        self.staff = User.objects.create(
            username="staff",
            email="staff@example.com",
            is_staff=True,
        )
        self.learner = User.objects.create(
            username="learner",
            email="learner@example.com",
        )
        self.secret = make_tag("Secret", access=ViewLevel.SPECIAL)
        self.draft = make_tag("Draft", published=PublishedState.UNPUBLISHED)

        # Override the item permission for the test
        rules.set_perm("ct_tagging.change_content_item", _item_permission)

    def tearDown(self):
        rules.set_perm("ct_tagging.change_content_item", can_change_content_item)
        super().tearDown()

    # Tag

    @ddt.data(
        "ct_tagging.add_tag",
        "ct_tagging.change_tag",
        "ct_tagging.delete_tag",
    )
    def test_change_tag(self, perm):
        """
        Tag administrators can create, modify or delete any tag
        """
        assert self.superuser.has_perm(perm)
        assert self.superuser.has_perm(perm, self.cats)
        assert self.staff.has_perm(perm)
        assert self.staff.has_perm(perm, self.cats)
        assert not self.learner.has_perm(perm)
        assert not self.learner.has_perm(perm, self.cats)

    @ddt.data(
        "ct_tagging.change_tag",
        "ct_tagging.delete_tag",
    )
    def test_change_root(self, perm):
        """
        Tag administrators can't change the root tag
        """
        assert not self.staff.has_perm(perm, self.tree.get_root())

    def test_view_tag(self):
        """
        Published tags can be viewed by anyone allowed to see their access level
        """
        perm = "ct_tagging.view_tag"
        assert self.learner.has_perm(perm)
        assert self.learner.has_perm(perm, self.cats)
        assert not self.learner.has_perm(perm, self.secret)
        assert not self.learner.has_perm(perm, self.draft)
        assert self.staff.has_perm(perm, self.secret)
        assert self.staff.has_perm(perm, self.draft)
        assert self.superuser.has_perm(perm, self.draft)

    # Content types

    @ddt.data(
        "ct_tagging.add_contentitemtype",
        "ct_tagging.change_contentitemtype",
        "ct_tagging.delete_contentitemtype",
    )
    def test_change_content_type(self, perm):
        assert self.superuser.has_perm(perm)
        assert self.staff.has_perm(perm)
        assert not self.learner.has_perm(perm)

    def test_view_content_type(self):
        assert self.learner.has_perm("ct_tagging.view_contentitemtype")

    # Tagging items

    @ddt.data(
        ("com_content.article", 1, True),
        ("com_content.article", 2, False),
        ("com_contact.contact", 1, False),
    )
    @ddt.unpack
    def test_can_tag_item(self, type_alias, content_item_id, learner_allowed):
        """
        Tag administrators can tag anything; other users need permission on the item
        """
        perm = "ct_tagging.can_tag_item"
        perm_item = ContentItemPermissionItem(type_alias=type_alias, content_item_id=content_item_id)
        assert self.superuser.has_perm(perm, perm_item)
        assert self.staff.has_perm(perm, perm_item)
        assert self.learner.has_perm(perm, perm_item) == learner_allowed

    def test_can_tag_item_without_item(self):
        assert self.staff.has_perm("ct_tagging.can_tag_item")
        assert not self.learner.has_perm("ct_tagging.can_tag_item")
