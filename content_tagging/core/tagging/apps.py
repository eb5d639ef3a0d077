"""
tagging Django application initialization.
"""

from django.apps import AppConfig


class TaggingConfig(AppConfig):
    """
    Configuration for the content tagging Django application.
    """

    name = "content_tagging.core.tagging"
    verbose_name = "Content Tagging"
    default_auto_field = "django.db.models.BigAutoField"
    label = "ct_tagging"
