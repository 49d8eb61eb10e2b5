"""Pytest configuration for BusFlow tracker tests."""

import pytest
from unittest.mock import AsyncMock, MagicMock, Mock


@pytest.fixture
def mock_aiohttp_session():
    """Mock aiohttp session for testing external API calls."""
    session = Mock()
    session.get = MagicMock()
    session.close = AsyncMock()
    return session


@pytest.fixture
def make_response():
    """Build a mock aiohttp response usable as ``async with session.get(...)``."""
    def _make(status=200, json_data=None, body=b"", error=None):
        response = MagicMock()
        response.status = status
        response.raise_for_status = MagicMock(side_effect=error)
        response.json = AsyncMock(return_value=json_data)
        response.read = AsyncMock(return_value=body)

        context = MagicMock()
        context.__aenter__ = AsyncMock(return_value=response)
        context.__aexit__ = AsyncMock(return_value=False)
        return context
    return _make


@pytest.fixture
def sample_batch():
    """Two buses in the TransitLive wire format ([lng, lat])."""
    return [
        {
            "properties": {"b": "B1", "r": "7", "line": "7 Whitmore Park"},
            "geometry": {"type": "Point", "coordinates": [-104.61, 50.45]},
        },
        {
            "properties": {"b": 412, "r": 30, "line": "30 University"},
            "geometry": {"type": "Point", "coordinates": ["-104.59", "50.42"]},
        },
    ]
