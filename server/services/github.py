"""
GitHub REST client used to ingest repositories.

Walks the recursive git tree for a branch and downloads every blob.
"""

import base64
import binascii
import logging
import re
from dataclasses import dataclass, field

import httpx

from config import GITHUB_TOKEN
from services.ingest import MAX_FILE_SIZE, should_skip

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
REPO_URL_RE = re.compile(r"^https://github\.com/([a-zA-Z0-9_.-]+)/([a-zA-Z0-9_.-]+)$")


class GitHubError(Exception):
    """Raised when the GitHub API cannot serve the repository"""


class InvalidRepositoryUrl(GitHubError):
    pass


@dataclass
class FetchedRepository:
    owner: str
    name: str
    files: dict[str, str] = field(default_factory=dict)  # path -> content
    total_size: int = 0


def parse_repo_url(repo_url: str) -> tuple[str, str]:
    """Parse and validate GitHub repo URL. Returns (owner, repo_name)."""
    repo_url = repo_url.strip().rstrip("/")
    # Remove .git suffix if present
    if repo_url.endswith(".git"):
        repo_url = repo_url[:-4]

    match = REPO_URL_RE.match(repo_url)
    if not match:
        raise InvalidRepositoryUrl("Invalid GitHub URL. Must be https://github.com/owner/repo-name")

    return match.group(1), match.group(2)


class GitHubClient:
    def __init__(self, token: str | None = GITHUB_TOKEN, transport: httpx.AsyncBaseTransport | None = None):
        self.token = token
        self.transport = transport
        self.headers = {"Accept": "application/vnd.github+json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=GITHUB_API_URL,
            headers=self.headers,
            timeout=30.0,
            transport=self.transport,
        )

    async def _get_json(self, client: httpx.AsyncClient, path: str, **params) -> dict:
        try:
            response = await client.get(path, params=params or None)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                raise GitHubError(f"Not found on GitHub: {path}") from e
            raise GitHubError(f"GitHub API returned {status} for {path}") from e
        except httpx.HTTPError as e:
            raise GitHubError(f"GitHub request failed: {e}") from e
        return response.json()

    async def fetch_repository(self, url: str, branch: str = "main") -> FetchedRepository:
        """
        Download the text files of `branch`.

        Vendored/binary paths and oversized blobs are skipped without a
        request. A blob that fails to download or decode is logged and
        skipped; a failure to read the tree raises GitHubError.
        """
        owner, repo = parse_repo_url(url)
        result = FetchedRepository(owner=owner, name=repo)

        async with self._client() as client:
            tree = await self._get_json(
                client, f"/repos/{owner}/{repo}/git/trees/{branch}", recursive="1"
            )
            if tree.get("truncated"):
                logger.warning(f"GitHub tree for {owner}/{repo} is truncated; ingesting a partial file set")

            for item in tree.get("tree", []):
                path = item.get("path")
                if item.get("type") != "blob" or not path:
                    continue
                if should_skip(path) or item.get("size", 0) > MAX_FILE_SIZE:
                    continue

                try:
                    blob = await self._get_json(client, f"/repos/{owner}/{repo}/git/blobs/{item['sha']}")
                    content = _decode_blob(blob)
                except (GitHubError, KeyError, ValueError) as e:
                    logger.error(f"Failed to fetch file {path}: {e}")
                    continue

                result.files[path] = content
                result.total_size += len(content)

        logger.info(f"Fetched {len(result.files)} files from {owner}/{repo}@{branch}")
        return result


def _decode_blob(blob: dict) -> str:
    """Blob payloads are base64 with embedded newlines; content must be UTF-8 text."""
    if blob.get("encoding", "base64") != "base64":
        return blob["content"]
    try:
        raw = base64.b64decode(blob["content"])
    except binascii.Error as e:
        raise ValueError(f"invalid base64 payload: {e}") from e
    return raw.decode("utf-8")


def get_github_client() -> GitHubClient:
    """FastAPI dependency"""
    return GitHubClient()
