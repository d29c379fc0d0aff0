"""Fetch pipeline for external sources."""

from .orchestrator import (
    ArticleStore,
    FetchOrchestrator,
    FetchStage,
    SourceNotFoundError,
)

__all__ = ["ArticleStore", "FetchOrchestrator", "FetchStage", "SourceNotFoundError"]
