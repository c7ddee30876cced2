"""
Failure taxonomy for the Metaphor backend.

Each error carries the HTTP status it maps to and the message shown to the
caller. Upstream diagnostics for generation failures are logged, not put in
the message.
"""
from typing import Optional


class MetaphorError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(MetaphorError):
    status_code = 400
    default_message = "Invalid request"


class NoCredential(MetaphorError):
    status_code = 500
    default_message = "Server configuration error"


class RateLimited(MetaphorError):
    status_code = 429
    default_message = "Too many requests. Please wait a minute or use your own API key."


class UpstreamUnavailable(MetaphorError):
    status_code = 502
    default_message = "AI service temporarily unavailable"


class NoContent(MetaphorError):
    status_code = 500
    default_message = "No content in AI response"


class NoGraphicsFound(MetaphorError):
    status_code = 500
    default_message = "AI did not return valid SVG"


class StoreError(MetaphorError):
    """Community store read or write failed. The message keeps the upstream detail."""
    status_code = 500
    default_message = "Community store request failed"

    def __init__(self, message: Optional[str] = None, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class ConcurrentModification(StoreError):
    default_message = "Community document was modified by another writer"
