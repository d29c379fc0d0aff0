"""Data models for councilfeed."""

from .article import CATEGORY_LABELS, Article, Category
from .source import Source, SourceKind

__all__ = ["Article", "Category", "CATEGORY_LABELS", "Source", "SourceKind"]
