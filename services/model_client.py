"""
Chat completion client for the Metaphor backend.

One call, one outcome: ``invoke`` never raises for upstream problems, it
returns a ``TransportFailure`` or ``ContentMissing`` instead. Retrying is the
caller's business.
"""
import logging
from typing import Optional, Union

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ModelReply(BaseModel):
    model: str
    text: str

    class Config:
        frozen = True


class TransportFailure(BaseModel):
    """Non-2xx status, network error or timeout. ``status_code`` is None when no response arrived."""
    model: str
    status_code: Optional[int] = None
    detail: str = ""

    class Config:
        frozen = True


class ContentMissing(BaseModel):
    """The call succeeded but the body carried no message text."""
    model: str

    class Config:
        frozen = True


InvocationOutcome = Union[ModelReply, TransportFailure, ContentMissing]


def extract_message_content(data) -> Optional[str]:
    """Return ``choices[0].message.content`` if present and non-empty."""
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not choices or not isinstance(choices, list):
        return None
    message = choices[0].get("message") if isinstance(choices[0], dict) else None
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    if isinstance(content, str) and content:
        return content
    return None


class ModelClient:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_url: str,
        referer: str = "",
        app_title: str = "",
        timeout: float = 30.0,
    ):
        self.http_client = http_client
        self.api_url = api_url
        self.referer = referer
        self.app_title = app_title
        self.timeout = timeout

    def _headers(self, api_key: str) -> dict:
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        if self.referer:
            headers["HTTP-Referer"] = self.referer
        if self.app_title:
            headers["X-Title"] = self.app_title
        return headers

    async def invoke(
        self,
        model: str,
        system_prompt: str,
        user_prompt: str,
        api_key: str,
        max_tokens: int,
        temperature: float,
    ) -> InvocationOutcome:
        """
        POST one chat completion request and classify the outcome.
        """
        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

        try:
            response = await self.http_client.post(
                self.api_url,
                json=payload,
                headers=self._headers(api_key),
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            logger.error(f"Model call timed out after {self.timeout}s for {model}: {e}")
            return TransportFailure(model=model, detail=f"timeout: {e}")
        except httpx.HTTPError as e:
            logger.error(f"Model call failed for {model}: {e}")
            return TransportFailure(model=model, detail=str(e))

        if not response.is_success:
            logger.error(f"Model API error for {model}: {response.status_code} {response.text[:500]}")
            return TransportFailure(model=model, status_code=response.status_code, detail=response.text)

        try:
            data = response.json()
        except ValueError:
            logger.error(f"Model API returned a non-JSON body for {model}")
            return ContentMissing(model=model)

        content = extract_message_content(data)
        if content is None:
            logger.warning(f"Model API response for {model} has no message content")
            return ContentMissing(model=model)

        return ModelReply(model=model, text=content)
