"""Command-line interface for councilfeed."""
