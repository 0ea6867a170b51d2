import os
import sys

import httpx
from httpx import AsyncClient
import pytest
import pytest_asyncio

# Set testing environment variable
os.environ["TESTING"] = "1"

# Add the project root to the path so imports work
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from main import create_app
from securitykit.security.manager import SecurityManager

TEST_CONFIG = {
    "uri_filter": [],
    "input_filter": ["<>"],
    "output_filter": ["htmlentities"],
    "uri_strict": True,
    "csrf_token_bytes": 32,
}


@pytest.fixture
def manager():
    """Create a security manager with the built-in filters and no config."""
    return SecurityManager()


@pytest.fixture
def test_app():
    """Create an application with a fixed security config and probe routes."""
    app = create_app(dict(TEST_CONFIG))

    @app.get("/a/b")
    def probe():
        return {"route": "a/b"}

    return app


@pytest_asyncio.fixture
async def client(test_app):
    """Create a test client bound to the ASGI app."""
    async with AsyncClient(
        transport=httpx.ASGITransport(app=test_app), base_url="http://test"
    ) as ac:
        yield ac


# Configure pytest-asyncio
pytest_plugins = ("pytest_asyncio",)
