import inspect
from typing import List

import pytest
import pytest_asyncio


def pytest_collection_modifyitems(items: List[pytest.Item]):
    """Mark coroutine tests as asyncio"""
    for item in items:
        function = getattr(item, "function", None)
        if (
            function is not None
            and item.get_closest_marker("asyncio") is None
            and inspect.iscoroutinefunction(function)
        ):
            item.add_marker(pytest.mark.asyncio)


@pytest_asyncio.fixture(scope="function")
async def client(request):
    """Fixture to provide a connected live client"""
    from tests.clients.MCPTestClient import MCPTestClient

    client = MCPTestClient()
    if request.config.getoption("--remote"):
        endpoint = request.config.getoption("--endpoint") or "http://localhost:8000/sse"
        await client.connect_sse(endpoint)
        print(f"Connected to majestic at {endpoint}")
    else:
        await client.connect_stdio()
        print("Connected to majestic over stdio")

    try:
        yield client
    finally:
        await client.cleanup()
