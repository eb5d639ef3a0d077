"""
Core models for content tagging
"""
from .base import ContentItemTagMap, ContentItemType, CoreContent, PublishedState, Tag, ViewLevel
from .tree import TagTree
