import pytest

from src.utils.majestic.client import MajesticClient
from tests.clients.MajesticStub import MajesticStub


def pytest_addoption(parser):
    """Add command-line options for the live tests"""
    parser.addoption(
        "--remote",
        action="store_true",
        help="Run live tests against a running remote server",
    )
    parser.addoption(
        "--endpoint",
        action="store",
        default=None,
        help="SSE endpoint of the remote server (for remote tests)",
    )


@pytest.fixture
def stub():
    """Majestic stub answering with an empty OK envelope unless reconfigured"""
    return MajesticStub()


@pytest.fixture
def majestic_client(stub):
    return MajesticClient("test-key", transport=stub.transport)


@pytest.fixture(autouse=True)
def no_ambient_api_key(request, monkeypatch):
    """Keep a developer's real MAJESTIC_API_KEY out of the unit tests"""
    # Live tests talk to the real API through the client fixture
    if "client" not in request.fixturenames:
        monkeypatch.delenv("MAJESTIC_API_KEY", raising=False)
