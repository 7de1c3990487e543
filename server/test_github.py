import asyncio
import base64

import httpx
import pytest

from services.github import GitHubClient, GitHubError, InvalidRepositoryUrl, parse_repo_url


def _b64(data: bytes) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    # GitHub wraps blob payloads at 60 characters
    return "\n".join(encoded[i:i + 60] for i in range(0, len(encoded), 60))


APP_SOURCE = "def main():\n    return 'ok'\n" * 5

TREE = {
    "sha": "main",
    "truncated": False,
    "tree": [
        {"path": "src", "type": "tree", "sha": "t1"},
        {"path": "src/app.py", "type": "blob", "sha": "s1", "size": len(APP_SOURCE)},
        {"path": "node_modules/x/index.js", "type": "blob", "sha": "s2", "size": 1},
        {"path": "broken.py", "type": "blob", "sha": "s3", "size": 1},
        {"path": "data.bin", "type": "blob", "sha": "s4", "size": 2},
    ],
}

BLOBS = {
    "s1": {"content": _b64(APP_SOURCE.encode("utf-8")), "encoding": "base64"},
    "s4": {"content": _b64(b"\xff\xfe"), "encoding": "base64"},
}


def _handler(requests: list):
    def handle(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        path = request.url.path
        if path == "/repos/acme/app/git/trees/main":
            return httpx.Response(200, json=TREE)
        if path.startswith("/repos/acme/app/git/blobs/"):
            sha = path.rsplit("/", 1)[1]
            if sha in BLOBS:
                return httpx.Response(200, json=BLOBS[sha])
            return httpx.Response(500, json={"message": "boom"})
        return httpx.Response(404, json={"message": "Not Found"})
    return handle


@pytest.mark.parametrize("url, expected", [
    ("https://github.com/acme/app", ("acme", "app")),
    ("https://github.com/acme/app/", ("acme", "app")),
    ("  https://github.com/acme/app.git ", ("acme", "app")),
    ("https://github.com/some-org/repo.name", ("some-org", "repo.name")),
])
def test_parse_repo_url(url, expected):
    assert parse_repo_url(url) == expected


@pytest.mark.parametrize("url", [
    "http://github.com/acme/app",
    "https://gitlab.com/acme/app",
    "https://github.com/acme",
    "https://github.com/acme/app/tree/main",
])
def test_parse_repo_url_rejects(url):
    with pytest.raises(InvalidRepositoryUrl):
        parse_repo_url(url)


def test_fetch_repository_downloads_text_blobs():
    requests = []
    client = GitHubClient(token="secret", transport=httpx.MockTransport(_handler(requests)))

    fetched = asyncio.run(client.fetch_repository("https://github.com/acme/app", "main"))

    assert fetched.owner == "acme"
    assert fetched.name == "app"
    # vendored path never requested; failed and undecodable blobs skipped
    assert fetched.files == {"src/app.py": APP_SOURCE}
    assert fetched.total_size == len(APP_SOURCE)

    tree_request = requests[0]
    assert tree_request.url.params["recursive"] == "1"
    assert tree_request.headers["Authorization"] == "Bearer secret"
    assert not any(r.url.path.endswith("/s2") for r in requests)


def test_fetch_repository_missing_branch_raises():
    client = GitHubClient(token=None, transport=httpx.MockTransport(_handler([])))
    with pytest.raises(GitHubError):
        asyncio.run(client.fetch_repository("https://github.com/acme/app", "does-not-exist"))


def test_client_without_token_sends_no_authorization():
    requests = []
    client = GitHubClient(token=None, transport=httpx.MockTransport(_handler(requests)))
    asyncio.run(client.fetch_repository("https://github.com/acme/app"))
    assert "Authorization" not in requests[0].headers
