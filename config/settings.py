"""
Runtime settings for the Metaphor backend.

All values come from the environment (a local .env file is honoured) and are
read once per process.
"""
import os
from typing import FrozenSet, Optional

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

DEFAULT_API_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_MODEL = "google/gemini-3-flash-preview"
DEFAULT_FALLBACK_MODEL = "google/gemini-2.5-flash"
DEFAULT_GITHUB_REPO = "ai-mindset-org/aim-lms"
DEFAULT_COMMUNITY_PATH = "public/metaphors/community.json"


def _parse_statuses(raw: Optional[str]) -> FrozenSet[int]:
    """Parse a comma separated list of HTTP status codes."""
    if not raw:
        return frozenset()
    return frozenset(int(part) for part in raw.split(",") if part.strip())


class Settings:
    def __init__(
        self,
        openrouter_api_key: Optional[str] = None,
        openrouter_api_url: str = DEFAULT_API_URL,
        default_model: str = DEFAULT_MODEL,
        fallback_model: str = DEFAULT_FALLBACK_MODEL,
        fallback_skip_statuses: FrozenSet[int] = frozenset(),
        app_referer: str = "https://aim-visual-toolkit.netlify.app",
        app_title: str = "AIM Visual Toolkit",
        upstream_timeout: float = 30.0,
        rate_limit_requests: int = 10,
        rate_limit_window: int = 60,
        github_token: Optional[str] = None,
        github_repo: str = DEFAULT_GITHUB_REPO,
        github_branch: str = "main",
        github_api_url: str = "https://api.github.com",
        community_file_path: str = DEFAULT_COMMUNITY_PATH,
    ):
        self.openrouter_api_key = openrouter_api_key
        self.openrouter_api_url = openrouter_api_url
        self.default_model = default_model
        self.fallback_model = fallback_model
        self.fallback_skip_statuses = fallback_skip_statuses
        self.app_referer = app_referer
        self.app_title = app_title
        self.upstream_timeout = upstream_timeout
        self.rate_limit_requests = rate_limit_requests
        self.rate_limit_window = rate_limit_window
        self.github_token = github_token
        self.github_repo = github_repo
        self.github_branch = github_branch
        self.github_api_url = github_api_url
        self.community_file_path = community_file_path

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            openrouter_api_key=os.getenv("OPENROUTER_API_KEY") or None,
            openrouter_api_url=os.getenv("OPENROUTER_API_URL", DEFAULT_API_URL),
            default_model=os.getenv("DEFAULT_MODEL", DEFAULT_MODEL),
            fallback_model=os.getenv("FALLBACK_MODEL", DEFAULT_FALLBACK_MODEL),
            fallback_skip_statuses=_parse_statuses(os.getenv("FALLBACK_SKIP_STATUSES")),
            app_referer=os.getenv("APP_REFERER", "https://aim-visual-toolkit.netlify.app"),
            app_title=os.getenv("APP_TITLE", "AIM Visual Toolkit"),
            upstream_timeout=float(os.getenv("UPSTREAM_TIMEOUT", "30")),
            rate_limit_requests=int(os.getenv("RATE_LIMIT_REQUESTS", "10")),  # requests per window
            rate_limit_window=int(os.getenv("RATE_LIMIT_WINDOW", "60")),  # seconds
            github_token=os.getenv("GITHUB_TOKEN") or None,
            github_repo=os.getenv("GITHUB_REPO", DEFAULT_GITHUB_REPO),
            github_branch=os.getenv("GITHUB_BRANCH", "main"),
            github_api_url=os.getenv("GITHUB_API_URL", "https://api.github.com"),
            community_file_path=os.getenv("COMMUNITY_FILE_PATH", DEFAULT_COMMUNITY_PATH),
        )


# Global settings instance - built on first use
settings = None


def get_settings() -> Settings:
    """Get or create the process settings instance"""
    global settings
    if settings is None:
        settings = Settings.from_env()
    return settings
