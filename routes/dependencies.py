"""
Shared FastAPI dependencies for the Metaphor backend
"""
import httpx
from fastapi import Depends, Request

from config.settings import Settings, get_settings
from services.community_store import CommunityStore
from services.exceptions import NoCredential
from services.generation_service import GenerationService
from services.model_client import ModelClient
from services.rate_limiter import RateLimiter


def get_http_client(request: Request) -> httpx.AsyncClient:
    """The process-wide upstream HTTP client, opened on startup."""
    return request.app.state.http_client


def get_rate_limiter(request: Request) -> RateLimiter:
    """The process-wide rate limiter."""
    return request.app.state.rate_limiter


def get_generation_service(
    settings: Settings = Depends(get_settings),
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> GenerationService:
    model_client = ModelClient(
        http_client,
        api_url=settings.openrouter_api_url,
        referer=settings.app_referer,
        app_title=settings.app_title,
        timeout=settings.upstream_timeout,
    )
    return GenerationService(
        model_client,
        default_model=settings.default_model,
        fallback_model=settings.fallback_model,
        fallback_skip_statuses=settings.fallback_skip_statuses,
    )


def get_community_store(
    settings: Settings = Depends(get_settings),
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> CommunityStore:
    """
    Build the community store; a missing GITHUB_TOKEN is a server misconfiguration.
    """
    if not settings.github_token:
        raise NoCredential("GitHub integration not configured")
    return CommunityStore(
        http_client,
        token=settings.github_token,
        repo=settings.github_repo,
        path=settings.community_file_path,
        branch=settings.github_branch,
        api_url=settings.github_api_url,
        timeout=settings.upstream_timeout,
    )
