"""councilfeed: external article ingestion for council member sources."""

__version__ = "0.1.0"
