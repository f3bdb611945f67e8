"""Pytest configuration and fixtures."""

import pytest
from typing import AsyncGenerator, Iterable
from httpx import AsyncClient, ASGITransport

from config import Config
from shortener.events import EventChannel
from shortener.storage import InMemoryURLStore
from shortener.service import URLShortenerService
from shortener.shortcode import ShortCodeGenerator
from shortener.common.logging_config import setup_logging
from shortener_web import create_app


class FixedCodeGenerator(ShortCodeGenerator):
    """Generator test double that replays a fixed sequence of codes."""
    
    def __init__(self, codes: Iterable[str]):
        super().__init__(default_length=7)
        self.codes = list(codes)
        self.calls = 0
    
    def generate(self, length=None) -> str:
        code = self.codes[min(self.calls, len(self.codes) - 1)]
        self.calls += 1
        return code


class UnavailableStore(InMemoryURLStore):
    """Store double whose size probe fails."""
    
    def __len__(self) -> int:
        raise RuntimeError("store unavailable")


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def store():
    """Create empty in-memory store."""
    return InMemoryURLStore(shards=8)


@pytest.fixture
def short_code_generator():
    """Create short code generator."""
    return ShortCodeGenerator(default_length=7)


@pytest.fixture
def events():
    """Create unbound event channel."""
    return EventChannel()


@pytest.fixture
def service(store, short_code_generator, events, logger) -> URLShortenerService:
    """Create service instance."""
    return URLShortenerService(
        store=store,
        short_code_generator=short_code_generator,
        events=events,
        logger=logger,
    )


@pytest.fixture
def config():
    """Create test configuration."""
    return Config(base_url="http://testserver")


@pytest.fixture
def app(service, config, logger):
    """Create test FastAPI app."""
    return create_app(
        service_instance=service,
        config=config,
        logger=logger,
    )


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]


@pytest.fixture
def fixed_code_generator():
    """Factory for generators that replay the given codes."""
    return FixedCodeGenerator


@pytest.fixture
def unavailable_store():
    """Store that fails its health probe."""
    return UnavailableStore(shards=2)
