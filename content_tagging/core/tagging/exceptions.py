"""
Exceptions raised by the content tagging app
"""
from __future__ import annotations

from django.utils.translation import gettext as _


class TaggingError(Exception):
    """
    Base exception for tagging
    """

    def __init__(self, message: str = ""):
        super().__init__()
        self.message = message

    def __str__(self):
        return str(self.message)

    def __repr__(self):
        return f"{self.__class__.__name__}({str(self)})"


class TagValidationError(TaggingError):
    """
    Malformed tag token, bad argument, or a structural change the tree can't take
    """


class NotFoundError(TaggingError):
    """
    Base exception for lookups that found nothing
    """


class TagNotFound(NotFoundError):
    """
    Exception used when a tag id doesn't exist
    """

    def __init__(self, tag_id: int | str, **kargs):
        super().__init__(**kargs)
        self.tag_id = tag_id
        self.message = _("Tag {tag_id} does not exist").format(tag_id=tag_id)


class ContentTypeNotFound(NotFoundError):
    """
    Exception used when a type alias isn't registered
    """

    def __init__(self, type_alias: str, **kargs):
        super().__init__(**kargs)
        self.type_alias = type_alias
        self.message = _("Content type '{type_alias}' is not registered").format(type_alias=type_alias)


class PersistenceError(TaggingError):
    """
    The database rejected a read or write (constraint violation, lock timeout...)
    """
