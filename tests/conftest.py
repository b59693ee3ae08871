"""Pytest configuration and shared fixtures."""

from unittest.mock import MagicMock

import pytest


@pytest.fixture
def db():
    """In-memory resource handle passed through to commands."""
    return {"users": ["alice", "bob"]}


@pytest.fixture
def dummy_logger():
    """Logger stand-in; the protocol must never call it."""
    return MagicMock(name="logger")
