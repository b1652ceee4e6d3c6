"""
Pytest configuration for api_connector tests.

This file contains shared fixtures and configuration
for all tests in the project.
"""

import pytest

from api_connector import ApiConnector, MockTransport, PendingRegistry
from api_connector.http_primitives import RequestConfig


@pytest.fixture
def mock_transport():
    """Create an in-memory transport answering 200 by default."""
    return MockTransport()


@pytest.fixture
def registry():
    """Create an empty pending registry."""
    return PendingRegistry()


@pytest.fixture
def connector(mock_transport, registry):
    """Create a connector accepting every response."""
    return ApiConnector(transport=mock_transport, registry=registry)


@pytest.fixture
def strict_connector(mock_transport, registry):
    """Create a connector accepting only 200 responses."""
    return ApiConnector(
        validate=lambda response: response.status == 200,
        transport=mock_transport,
        registry=registry,
    )


@pytest.fixture
def sample_config():
    """Sample request configuration for testing."""
    return RequestConfig.create(
        "post",
        "https://api.example.com/v1/items",
        params={"page": 2},
        data={"name": "item"},
        headers={"Authorization": "Bearer token123"},
        timeout=5.0,
    )

