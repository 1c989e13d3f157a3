"""Pytest configuration and shared fixtures."""

import pytest

from coops_client import CoOpsClient, MockClientTransport, create_test_client


@pytest.fixture
def mock_transport() -> MockClientTransport:
    """Fresh mock transport with no canned responses."""
    return MockClientTransport()


@pytest.fixture
def client(mock_transport: MockClientTransport) -> CoOpsClient:
    """Client with an empty base path wired to the mock transport."""
    return create_test_client(mock_transport)
