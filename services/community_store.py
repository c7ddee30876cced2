"""
Community store for the Metaphor backend.

The community gallery is a single JSON file in a GitHub repository, updated
through the contents API. Every append is read -> prepend -> conditional
write, where the write carries the blob sha from the read. GitHub refuses the
write if another commit changed the file in between; that surfaces as
``ConcurrentModification`` and is not retried here.
"""
import base64
import json
import logging
import random
import string
import time

import httpx
from pydantic import ValidationError

from models.community import (
    MAX_AUTHOR_LENGTH,
    MAX_PROMPT_LENGTH,
    MAX_TITLE_LENGTH,
    CommunityDocument,
    CommunityEntry,
    RemoteDocumentHandle,
    SaveCommunityRequest,
    utc_timestamp,
)
from services.exceptions import ConcurrentModification, StoreError

logger = logging.getLogger(__name__)

BASE36_ALPHABET = string.digits + string.ascii_lowercase
ENTRY_ID_RANDOM_LENGTH = 8


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_entry_id() -> str:
    """Time-ordered id with a random suffix, e.g. ``cm-m5x2k1ab-3fz9q0lc``."""
    timestamp = to_base36(int(time.time() * 1000))
    suffix = "".join(random.choices(BASE36_ALPHABET, k=ENTRY_ID_RANDOM_LENGTH))
    return f"cm-{timestamp}-{suffix}"


def build_entry(submission: SaveCommunityRequest) -> CommunityEntry:
    """Create a new community entry from a validated submission, applying length caps."""
    prompt = submission.prompt[:MAX_PROMPT_LENGTH]
    return CommunityEntry(
        id=generate_entry_id(),
        title=submission.title[:MAX_TITLE_LENGTH],
        title_en=submission.title_en.upper()[:MAX_TITLE_LENGTH],
        description=prompt,
        insight="",
        prompt=prompt,
        svg=submission.svg,
        author=(submission.author or "anonymous")[:MAX_AUTHOR_LENGTH],
        created_at=utc_timestamp(),
        source="community",
    )


def encode_document(document: CommunityDocument) -> str:
    raw = json.dumps(document.model_dump(by_alias=True), indent=2, ensure_ascii=False)
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def decode_document(content: str) -> CommunityDocument:
    raw = base64.b64decode(content).decode("utf-8")
    return CommunityDocument.model_validate(json.loads(raw))


class CommunityStore:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        token: str,
        repo: str,
        path: str,
        branch: str = "main",
        api_url: str = "https://api.github.com",
        timeout: float = 30.0,
    ):
        self.http_client = http_client
        self.token = token
        self.repo = repo
        self.path = path
        self.branch = branch
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    @property
    def contents_url(self) -> str:
        return f"{self.api_url}/repos/{self.repo}/contents/{self.path}"

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "AIM-Visual-Toolkit",
        }

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            return await self.http_client.request(
                method, url, headers=self._headers(), timeout=self.timeout, **kwargs
            )
        except httpx.HTTPError as e:
            logger.error(f"GitHub request {method} {url} failed: {e}")
            raise StoreError(f"GitHub request failed: {e}")

    async def _read_blob(self, sha: str) -> str:
        """Files over 1 MB come back without inline content; fetch them through the blobs API."""
        response = await self._request("GET", f"{self.api_url}/repos/{self.repo}/git/blobs/{sha}")
        if not response.is_success:
            raise StoreError(
                f"GitHub API error: {response.status_code} - {response.text}",
                upstream_status=response.status_code,
            )
        try:
            data = response.json()
        except ValueError:
            raise StoreError(f"GitHub blob API returned a non-JSON body: {response.text[:200]}")
        if not isinstance(data, dict):
            raise StoreError("GitHub blob API returned an unexpected payload")
        return data.get("content") or ""

    async def read_document(self) -> RemoteDocumentHandle:
        """
        Fetch the community document and the sha it was read at.

        A missing file yields an empty document with no version token.
        """
        response = await self._request("GET", self.contents_url, params={"ref": self.branch})

        if response.status_code == 404:
            logger.info(f"{self.path} not found in {self.repo}, it will be created on first save")
            return RemoteDocumentHandle(document=CommunityDocument(), version_token=None)

        if not response.is_success:
            raise StoreError(
                f"GitHub API error: {response.status_code} - {response.text}",
                upstream_status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            raise StoreError(f"GitHub API returned a non-JSON body: {response.text[:200]}")
        if not isinstance(data, dict):
            # A directory listing comes back as a JSON array
            raise StoreError(f"GitHub API returned an unexpected payload for {self.path}")

        sha = data.get("sha")
        content = data.get("content") or ""
        if not content and sha:
            content = await self._read_blob(sha)

        try:
            document = decode_document(content)
        except (ValueError, ValidationError) as e:
            logger.error(f"{self.path} in {self.repo} is not a valid community document: {e}")
            raise StoreError(f"Community document is malformed: {e}")

        return RemoteDocumentHandle(document=document, version_token=sha)

    async def write_document(self, handle: RemoteDocumentHandle, message: str) -> None:
        """
        Commit ``handle.document`` on top of the revision it was read at.

        Raises:
            ConcurrentModification: the file changed since it was read
            StoreError: any other GitHub failure
        """
        body = {
            "message": message,
            "content": encode_document(handle.document),
            "branch": self.branch,
        }
        # A sha is only sent for updates; omitting it means "create"
        if handle.exists:
            body["sha"] = handle.version_token

        response = await self._request("PUT", self.contents_url, json=body)
        if response.is_success:
            return

        detail = f"{response.status_code} - {response.text}"
        if response.status_code == 409 or (response.status_code == 422 and "sha" in response.text):
            logger.warning(f"Conflicting write to {self.path}: {detail}")
            raise ConcurrentModification(
                f"GitHub commit conflict: {detail}", upstream_status=response.status_code
            )
        raise StoreError(f"GitHub commit failed: {detail}", upstream_status=response.status_code)

    async def append_entry(self, submission: SaveCommunityRequest) -> CommunityEntry:
        """
        Prepend a new entry to the community document.

        Returns:
            The persisted entry, including its generated id
        """
        handle = await self.read_document()

        entry = build_entry(submission)
        document = handle.document.model_copy(deep=True)
        document.metaphors.insert(0, entry)
        document.updated_at = utc_timestamp()

        commit_message = f'feat(metaphors): add "{entry.title_en}" by {entry.author}'
        await self.write_document(
            RemoteDocumentHandle(document=document, version_token=handle.version_token),
            commit_message,
        )
        logger.info(f"Saved community metaphor {entry.id} to {self.repo}/{self.path}")
        return entry

    async def get_document(self) -> CommunityDocument:
        handle = await self.read_document()
        return handle.document

