"""
Field helpers that make text comparison rules explicit.

MySQL compares text case-insensitively by default while SQLite and PostgreSQL
do not. Tag lookups depend on this: a tag title is matched exactly (so "PHP"
and "php" are different tags), but aliases and content type aliases are
identifiers that must stay unique regardless of case.
"""
from __future__ import annotations

from django.db import models

from .collations import MultiCollationMixin


def case_insensitive_char_field(**kwargs) -> MultiCollationCharField:
    """
    Return a case-insensitive ``MultiCollationCharField``.

    Unique indexes on this field reject "abc" when "ABC" already exists.
    Any argument accepted by ``CharField`` may be overridden.
    """
    final_kwargs = {
        "null": False,
        "db_collations": {
            "sqlite": "NOCASE",
            "mysql": "utf8mb4_unicode_ci",
        },
    }
    final_kwargs.update(kwargs)

    return MultiCollationCharField(**final_kwargs)


def case_sensitive_char_field(**kwargs) -> MultiCollationCharField:
    """
    Return a case-sensitive ``MultiCollationCharField``.

    "abc" and "ABC" are distinct values, for equality filters as well as for
    unique indexes.
    """
    final_kwargs = {
        "null": False,
        "db_collations": {
            "sqlite": "BINARY",
            "mysql": "utf8mb4_bin",
        },
    }
    final_kwargs.update(kwargs)

    return MultiCollationCharField(**final_kwargs)


class MultiCollationCharField(MultiCollationMixin, models.CharField):
    """
    CharField with per-database-vendor collation settings.
    """


class MultiCollationTextField(MultiCollationMixin, models.TextField):
    """
    TextField with per-database-vendor collation settings.

    Used for long text (bodies, metadata) where only the charset matters.
    """
