"""In-memory stand-ins for the upstream services used by the Metaphor backend.

Both fakes are served through ``httpx.MockTransport``:

- ``FakeChatAPI`` answers chat-completion calls and records every request.
- ``FakeGitHubContents`` implements the slice of the GitHub contents API the
  community store uses, including the sha precondition on writes.
"""

import base64
import json
import uuid
from typing import Callable, Dict, List, Optional

import httpx

from prompts.metaphor_prompts import TITLE_SYSTEM_PROMPT

CHAT_URL = "https://chat.test/api/v1/chat/completions"
GITHUB_API_URL = "https://github.test"
GITHUB_REPO = "example-org/metaphors"
COMMUNITY_PATH = "public/metaphors/community.json"

PRIMARY_MODEL = "test/primary-model"
FALLBACK_MODEL = "test/fallback-model"

VALID_SVG = (
    '<svg width="800" height="800" viewBox="0 0 800 800" xmlns="http://www.w3.org/2000/svg">'
    '<circle cx="400" cy="400" r="120" fill="#DC2626"/></svg>'
)
SVG_REPLY_TEXT = f"Here is your metaphor:\n```svg\n{VALID_SVG}\n```\nEnjoy!"
TITLE_REPLY_TEXT = 'Sure! {"title": "Нейронный поток", "titleEn": "Neural Flow"}'

Reply = Callable[[], httpx.Response]


def chat_reply(content: Optional[str], status_code: int = 200) -> Reply:
    """Build a reply factory returning a chat-completion body with ``content``."""
    message = {} if content is None else {"content": content}

    def reply() -> httpx.Response:
        return httpx.Response(status_code, json={"choices": [{"message": message}]})

    return reply


def error_reply(status_code: int, body: str = "upstream error") -> Reply:
    def reply() -> httpx.Response:
        return httpx.Response(status_code, text=body)

    return reply


def raising_reply(exc: Exception) -> Reply:
    def reply() -> httpx.Response:
        raise exc

    return reply


class FakeChatAPI:
    """In-memory chat-completion endpoint that tells SVG and title calls apart."""

    def __init__(self):
        self.calls: List[Dict] = []
        self.svg_replies: Dict[str, Reply] = {}
        self.default_svg_reply: Reply = chat_reply(SVG_REPLY_TEXT)
        self.title_reply: Reply = chat_reply(TITLE_REPLY_TEXT)

    def handle(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        is_title = payload["messages"][0]["content"] == TITLE_SYSTEM_PROMPT
        self.calls.append(
            {
                "kind": "title" if is_title else "svg",
                "model": payload["model"],
                "payload": payload,
                "authorization": request.headers.get("authorization"),
            }
        )
        if is_title:
            return self.title_reply()
        return self.svg_replies.get(payload["model"], self.default_svg_reply)()

    @property
    def svg_calls(self) -> List[Dict]:
        return [call for call in self.calls if call["kind"] == "svg"]

    @property
    def title_calls(self) -> List[Dict]:
        return [call for call in self.calls if call["kind"] == "title"]


class FakeGitHubContents:
    """Single-file GitHub contents API with optimistic concurrency on the blob sha."""

    def __init__(self):
        self.content: Optional[str] = None
        self.sha: Optional[str] = None
        self.puts: List[Dict] = []
        self.fail_reads_with: Optional[int] = None
        self.inline_content = True
        # Overrides for malformed upstream answers
        self.contents_reply: Optional[Reply] = None
        self.blob_reply: Optional[Reply] = None
        self.before_put: Optional[Callable[[], None]] = None

    @property
    def document(self) -> Optional[dict]:
        return None if self.content is None else json.loads(self.content)

    def seed(self, document: dict) -> None:
        self.content = json.dumps(document)
        self.sha = uuid.uuid4().hex

    def concurrent_write(self, mutate: Callable[[dict], None]) -> None:
        """Simulate another writer committing a change."""
        document = self.document
        mutate(document)
        self.seed(document)

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        contents_path = f"/repos/{GITHUB_REPO}/contents/{COMMUNITY_PATH}"

        if request.method == "GET" and path.startswith(f"/repos/{GITHUB_REPO}/git/blobs/"):
            if self.blob_reply:
                return self.blob_reply()
            encoded = base64.b64encode(self.content.encode("utf-8")).decode("ascii")
            return httpx.Response(200, json={"sha": self.sha, "content": encoded, "encoding": "base64"})

        if path != contents_path:
            return httpx.Response(404, json={"message": "Not Found"})

        if request.method == "GET" and self.contents_reply:
            return self.contents_reply()

        if request.method == "GET":
            if self.fail_reads_with:
                return httpx.Response(self.fail_reads_with, json={"message": "Server Error"})
            if self.content is None:
                return httpx.Response(404, json={"message": "Not Found"})
            if not self.inline_content:
                return httpx.Response(200, json={"sha": self.sha, "content": "", "encoding": "none"})
            encoded = base64.encodebytes(self.content.encode("utf-8")).decode("ascii")
            return httpx.Response(200, json={"sha": self.sha, "content": encoded, "encoding": "base64"})

        if request.method == "PUT":
            if self.before_put:
                self.before_put()
            body = json.loads(request.content)
            self.puts.append(body)
            supplied = body.get("sha")
            if self.content is not None and supplied is None:
                return httpx.Response(422, json={"message": 'Invalid request.\n\n"sha" wasn\'t supplied.'})
            if supplied != self.sha:
                return httpx.Response(409, json={"message": f"{COMMUNITY_PATH} does not match {supplied}"})
            created = self.content is None
            self.content = base64.b64decode(body["content"]).decode("utf-8")
            self.sha = uuid.uuid4().hex
            return httpx.Response(201 if created else 200, json={"content": {"sha": self.sha}})

        return httpx.Response(405, json={"message": "Method Not Allowed"})


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
