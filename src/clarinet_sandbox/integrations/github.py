# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

import asyncio
import base64
import binascii
import re
from typing import Any
from urllib.parse import urlencode

import httpx
from loguru import logger
from pydantic import BaseModel, ValidationError

from clarinet_sandbox.exceptions import GitHubError

GITHUB_API_URL = "https://api.github.com"
GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
OAUTH_SCOPE = "read:user user:email repo gist"
ACCEPT_V3 = "application/vnd.github.v3+json"

CLONE_MAX_FILES = 50
CLONE_MAX_FILE_SIZE = 500_000
FALLBACK_BRANCH = "master"
DEFAULT_GIST_DESCRIPTION = "Created with LabSTX IDE"
_BINARY_PATH = re.compile(r"\.(png|jpg|jpeg|gif|ico|pdf|zip|tar|gz|woff|woff2|ttf|eot)$", re.IGNORECASE)

REPO_FIELDS = (
    "id",
    "name",
    "full_name",
    "description",
    "html_url",
    "clone_url",
    "private",
    "language",
    "updated_at",
)


class GitHubUser(BaseModel):
    login: str
    avatar_url: str | None = None
    name: str | None = None
    id: int


class GitHubAuth(BaseModel):
    """Contents of the ``github_auth`` cookie."""

    token: str
    user: GitHubUser


def encode_auth_cookie(auth: GitHubAuth) -> str:
    return base64.b64encode(auth.model_dump_json().encode("utf-8")).decode("ascii")


def decode_auth_cookie(value: str | None) -> GitHubAuth | None:
    """Decode a ``github_auth`` cookie, or None when absent or malformed."""
    if not value:
        return None
    try:
        return GitHubAuth.model_validate_json(base64.b64decode(value))
    except (binascii.Error, ValueError, ValidationError):
        return None


def authorize_url(client_id: str, redirect_uri: str) -> str:
    query = urlencode({"client_id": client_id, "redirect_uri": redirect_uri, "scope": OAUTH_SCOPE})
    return f"{GITHUB_AUTHORIZE_URL}?{query}"


class GitHubClient:
    """Thin async client for the GitHub endpoints the IDE proxies."""

    def __init__(self, token: str | None = None, client: httpx.AsyncClient | None = None):
        """Initializes the GitHubClient.

        Args:
            token: OAuth access token. Anonymous requests when omitted.
            client: Optional httpx.AsyncClient for connection pooling.
        """
        self._token = token
        self._internal_client = client is None
        self._client = client or httpx.AsyncClient(timeout=30.0)

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        if self._internal_client:
            await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": ACCEPT_V3}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        res = await self._client.request(method, url, headers=self._headers(), **kwargs)
        if res.status_code >= 400:
            try:
                payload = res.json()
            except ValueError:
                payload = {"raw": res.text}
            message = payload.get("message") if isinstance(payload, dict) else None
            raise GitHubError(
                message or f"GitHub API error {res.status_code} for {method} {url}",
                status_code=res.status_code,
                payload=payload,
            )
        return res.json()

    async def exchange_code(self, client_id: str, client_secret: str, code: str) -> str:
        """Trade an OAuth callback code for an access token."""
        res = await self._client.post(
            GITHUB_TOKEN_URL,
            json={"client_id": client_id, "client_secret": client_secret, "code": code},
            headers={"Accept": "application/json"},
        )
        data = res.json()
        if "error" in data:
            raise GitHubError(data["error"], status_code=res.status_code, payload=data)
        self._token = data["access_token"]
        return self._token

    async def get_user(self) -> GitHubUser:
        data = await self._request("GET", f"{GITHUB_API_URL}/user")
        return GitHubUser.model_validate(data)

    async def list_repos(self) -> list[dict[str, Any]]:
        data = await self._request(
            "GET", f"{GITHUB_API_URL}/user/repos", params={"sort": "updated", "per_page": 50}
        )
        if not isinstance(data, list):
            return []
        return [{key: repo.get(key) for key in REPO_FIELDS} for repo in data]

    async def _get_tree(self, owner: str, repo: str, branch: str) -> list[dict[str, Any]]:
        data = await self._request(
            "GET",
            f"{GITHUB_API_URL}/repos/{owner}/{repo}/git/trees/{branch}",
            params={"recursive": 1},
        )
        return list(data.get("tree", []))

    async def get_tree(self, owner: str, repo: str, branch: str = "main") -> list[dict[str, Any]]:
        """Fetch the recursive tree of a branch.

        Two attempts at most: the requested branch, then ``master`` when the
        requested branch was ``main``. The second failure is raised.
        """
        try:
            return await self._get_tree(owner, repo, branch)
        except GitHubError:
            if branch != "main":
                raise
            logger.info(f"Branch main not found for {owner}/{repo}, trying {FALLBACK_BRANCH}")
        return await self._get_tree(owner, repo, FALLBACK_BRANCH)

    async def _get_blob(self, url: str) -> str:
        blob = await self._request("GET", url)
        return base64.b64decode(blob["content"]).decode("utf-8")

    async def clone(self, owner: str, repo: str, branch: str = "main") -> dict[str, str]:
        """Fetch the text files of a repository, keyed by path.

        Reads at most 50 blobs and skips large or binary files. A blob that
        fails to load is logged and left out.
        """
        tree = await self.get_tree(owner, repo, branch)
        blobs = [item for item in tree if item.get("type") == "blob"][:CLONE_MAX_FILES]
        wanted = [
            item
            for item in blobs
            if item.get("size", 0) <= CLONE_MAX_FILE_SIZE and not _BINARY_PATH.search(item["path"])
        ]

        contents = await asyncio.gather(*(self._get_blob(item["url"]) for item in wanted), return_exceptions=True)

        files: dict[str, str] = {}
        for item, content in zip(wanted, contents):
            if isinstance(content, BaseException):
                logger.warning(f"Failed to fetch {item['path']}: {content}")
                continue
            files[item["path"]] = content
        return files

    async def create_gist(self, files: dict[str, str], description: str | None = None, public: bool = True) -> dict[str, Any]:
        """Create a gist; ``/`` in file names becomes ``_``."""
        payload = {
            "description": description or DEFAULT_GIST_DESCRIPTION,
            "public": public,
            "files": {name.replace("/", "_"): {"content": content} for name, content in files.items()},
        }
        return await self._request("POST", f"{GITHUB_API_URL}/gists", json=payload)
