"""Shared pytest fixtures for the Metaphor backend tests."""

import httpx
import pytest
from fastapi.testclient import TestClient

from config.settings import Settings, get_settings
from index import app
from routes.dependencies import get_http_client, get_rate_limiter
from services.rate_limiter import RateLimiter
from tests.fakes import (
    CHAT_URL,
    COMMUNITY_PATH,
    FALLBACK_MODEL,
    GITHUB_API_URL,
    GITHUB_REPO,
    PRIMARY_MODEL,
    FakeChatAPI,
    FakeClock,
    FakeGitHubContents,
)


@pytest.fixture
def chat_api() -> FakeChatAPI:
    return FakeChatAPI()


@pytest.fixture
def github_api() -> FakeGitHubContents:
    return FakeGitHubContents()


@pytest.fixture
def http_client(chat_api: FakeChatAPI, github_api: FakeGitHubContents) -> httpx.AsyncClient:
    """Async client whose transport routes to the fakes by host."""

    def route(request: httpx.Request) -> httpx.Response:
        if request.url.host == "chat.test":
            return chat_api.handle(request)
        if request.url.host == "github.test":
            return github_api.handle(request)
        return httpx.Response(404)

    return httpx.AsyncClient(transport=httpx.MockTransport(route))


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        openrouter_api_key="server-key",
        openrouter_api_url=CHAT_URL,
        default_model=PRIMARY_MODEL,
        fallback_model=FALLBACK_MODEL,
        rate_limit_requests=10,
        rate_limit_window=60,
        github_token="gh-token",
        github_repo=GITHUB_REPO,
        github_api_url=GITHUB_API_URL,
        community_file_path=COMMUNITY_PATH,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_limiter(clock: FakeClock) -> RateLimiter:
    return RateLimiter(max_requests=10, window_seconds=60, clock=clock)


@pytest.fixture
def test_client(test_settings: Settings, http_client: httpx.AsyncClient, rate_limiter: RateLimiter):
    """TestClient with settings, upstream client and limiter overridden."""
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_http_client] = lambda: http_client
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
