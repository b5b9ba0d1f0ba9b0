"""Test configuration and fixtures for remote-config tests."""

import json

import pytest
from loguru import logger

from remote_config.parsers import JsonObjectParser
from remote_config.source import ConfigurationSource
from remote_config.stores import InMemoryStore

BUCKET = "cfg"
KEY = "app.json"


@pytest.fixture
def store():
    """Create an in-memory store with no objects."""
    return InMemoryStore()


@pytest.fixture
def settings():
    """Nested settings document."""
    return {
        "name": "TestApp",
        "debug": True,
        "database": {"host": "localhost", "port": 5432},
        "features": ["search", "export"],
    }


@pytest.fixture
def seeded_store(store, settings):
    """Store holding the settings document under cfg/app.json."""
    store.put(BUCKET, KEY, json.dumps(settings))
    return store


@pytest.fixture
def source():
    """Mandatory JSON source without periodic reloads."""
    return ConfigurationSource(BUCKET, KEY, parser=JsonObjectParser())


@pytest.fixture
def optional_source():
    """Optional JSON source without periodic reloads."""
    return ConfigurationSource(BUCKET, KEY, optional=True, parser=JsonObjectParser())


@pytest.fixture
def log_records():
    """Capture loguru records emitted during a test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
