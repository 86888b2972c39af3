"""pytest configuration and shared fixtures.

Provides topology builders used across the service tests and an async HTTP
client bound to the FastAPI app through ASGI transport.
"""

from collections.abc import AsyncGenerator, Callable
from typing import cast

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from starlette.types import ASGIApp

from lineflow.main import app
from lineflow.models import Connection, MachineNode, QueueNode
from lineflow.services.topology import Topology

# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests",
    )


# =============================================================================
# TOPOLOGY FIXTURES
# =============================================================================

TopologyFactory = Callable[..., Topology]


def _make_topology(
    queues: list[str] = (),
    machines: list[str] = (),
    edges: list[tuple[str, str]] = (),
    cascade: bool = True,
) -> Topology:
    topology = Topology(cascade=cascade)
    for index, queue_id in enumerate(queues):
        topology.upsert_node(QueueNode(id=queue_id, x=100.0 * index, y=50.0))
    for index, machine_id in enumerate(machines):
        topology.upsert_node(
            MachineNode(id=machine_id, name=f"Machine-{machine_id}", x=100.0 * index, y=250.0)
        )
    for from_id, to_id in edges:
        topology.upsert_connection(Connection(from_id=from_id, to_id=to_id))
    return topology


@pytest.fixture
def make_topology() -> TopologyFactory:
    """Factory building a topology from queue ids, machine ids and edges.

    Example:
        topology = make_topology(["Q1", "Q2"], ["M1"], [("Q1", "M1"), ("M1", "Q2")])
    """
    return _make_topology


@pytest.fixture
def line_topology() -> Topology:
    """Minimal valid line: Q1 -> M1 -> Q2."""
    return _make_topology(["Q1", "Q2"], ["M1"], [("Q1", "M1"), ("M1", "Q2")])


# =============================================================================
# HTTP CLIENT FIXTURES
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing API endpoints.

    Uses ASGI transport to test the FastAPI app without running a server.
    """
    try:
        transport = ASGITransport(app=cast("ASGIApp", app))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()
