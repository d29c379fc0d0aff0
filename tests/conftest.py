"""Shared fixtures."""

import httpx
import pytest

from councilfeed.config import FetchConfig
from councilfeed.ingestion import FeedFetcher
from councilfeed.pipeline import FetchOrchestrator

from support import FIXED_NOW, FakeServer, InMemoryStore, make_source


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore([make_source()])


@pytest.fixture
def fetch_config() -> FetchConfig:
    return FetchConfig()


@pytest.fixture
def orchestrator(store, server, fetch_config) -> FetchOrchestrator:
    fetcher = FeedFetcher(fetch_config, transport=httpx.MockTransport(server))
    return FetchOrchestrator(store, config=fetch_config, fetcher=fetcher, clock=lambda: FIXED_NOW)
