"""
Per-vendor collation support for text fields.

Tag titles must compare case-sensitively (exact-title lookup) while aliases and
type aliases should not, and the default collations of SQLite and MySQL disagree
on both. The ``fields`` module uses this mixin to pin the behavior per vendor.
"""
from __future__ import annotations


class MultiCollationMixin:
    """
    Mixin for CharField and TextField subclasses that picks a collation per vendor.

    ``db_collations`` maps ``connection.vendor`` names to collations, e.g.
    ``{"sqlite": "NOCASE", "mysql": "utf8mb4_unicode_ci"}``. Vendors that are
    not listed keep the column's default collation.
    """

    def __init__(self, *args, db_collations: dict[str, str] | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.db_collations = dict(db_collations or {})

    def collation_for(self, vendor: str) -> str | None:
        return self.db_collations.get(vendor)

    def db_parameters(self, connection):
        db_params = super().db_parameters(connection)
        collation = self.collation_for(connection.vendor)
        if collation:
            db_params["collation"] = collation
        return db_params

    def deconstruct(self):
        """
        Keep ``db_collations`` in migrations.
        """
        name, path, args, kwargs = super().deconstruct()
        if self.db_collations:
            kwargs["db_collations"] = self.db_collations
        return name, path, args, kwargs
