# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

from typing import Any
from urllib.parse import quote

import httpx
from fastapi import APIRouter, Cookie, Depends
from fastapi.responses import JSONResponse, RedirectResponse
from loguru import logger

from clarinet_sandbox.api.deps import get_config, get_http_client
from clarinet_sandbox.config import SandboxConfig
from clarinet_sandbox.exceptions import GitHubError
from clarinet_sandbox.integrations.github import (
    GitHubAuth,
    GitHubClient,
    authorize_url,
    decode_auth_cookie,
    encode_auth_cookie,
)
from clarinet_sandbox.models.api import CloneRequest, GistRequest

AUTH_COOKIE = "github_auth"
AUTH_COOKIE_MAX_AGE = 7 * 24 * 60 * 60

router = APIRouter()


def _not_authenticated() -> JSONResponse:
    return JSONResponse(status_code=401, content={"error": "Not authenticated"})


@router.get("/auth/github")
async def github_login(config: SandboxConfig = Depends(get_config)) -> Any:
    if not config.github_client_id:
        return JSONResponse(status_code=500, content={"error": "GitHub OAuth not configured"})
    redirect_uri = f"{config.public_url.rstrip('/')}/ide-api/auth/github/callback"
    return RedirectResponse(authorize_url(config.github_client_id, redirect_uri))


@router.get("/auth/github/callback")
async def github_callback(
    code: str | None = None,
    config: SandboxConfig = Depends(get_config),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> RedirectResponse:
    if not code:
        return RedirectResponse("/?error=no_code")
    if not config.github_client_id or not config.github_client_secret:
        return RedirectResponse("/?error=oauth_not_configured")

    github = GitHubClient(client=http)
    try:
        token = await github.exchange_code(config.github_client_id, config.github_client_secret, code)
        user = await github.get_user()
    except GitHubError as e:
        logger.error(f"GitHub OAuth error: {e}")
        return RedirectResponse(f"/?error={quote(str(e))}")
    except (httpx.HTTPError, ValueError, KeyError) as e:
        logger.error(f"GitHub OAuth callback error: {e}")
        return RedirectResponse("/?error=oauth_failed")

    response = RedirectResponse(config.frontend_url)
    response.set_cookie(
        AUTH_COOKIE,
        encode_auth_cookie(GitHubAuth(token=token, user=user)),
        max_age=AUTH_COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        samesite="lax",
    )
    return response


@router.get("/auth/logout")
async def logout(config: SandboxConfig = Depends(get_config)) -> RedirectResponse:
    response = RedirectResponse(config.frontend_url)
    response.delete_cookie(AUTH_COOKIE, path="/", httponly=True, samesite="lax")
    return response


@router.get("/github/user")
async def github_user(github_auth: str | None = Cookie(default=None)) -> dict[str, Any]:
    auth = decode_auth_cookie(github_auth)
    if auth is None:
        return {"authenticated": False}
    return {"authenticated": True, "user": auth.user.model_dump()}


@router.get("/github/repos")
async def github_repos(
    github_auth: str | None = Cookie(default=None),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> Any:
    auth = decode_auth_cookie(github_auth)
    if auth is None:
        return _not_authenticated()
    try:
        repos = await GitHubClient(auth.token, client=http).list_repos()
    except (GitHubError, httpx.HTTPError) as e:
        logger.error(f"Error fetching repos: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to fetch repositories"})
    return {"repos": repos}


@router.post("/github/clone")
async def github_clone(
    body: CloneRequest,
    github_auth: str | None = Cookie(default=None),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> Any:
    # Public repositories can be cloned anonymously.
    auth = decode_auth_cookie(github_auth)
    github = GitHubClient(auth.token if auth else None, client=http)
    try:
        files = await github.clone(body.owner, body.repo, body.branch)
    except (GitHubError, httpx.HTTPError) as e:
        logger.error(f"Clone error: {e}")
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})
    return {
        "success": True,
        "repo": f"{body.owner}/{body.repo}",
        "files": files,
        "fileCount": len(files),
    }


@router.post("/github/gist")
async def github_gist(
    body: GistRequest,
    github_auth: str | None = Cookie(default=None),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> Any:
    auth = decode_auth_cookie(github_auth)
    if auth is None:
        return _not_authenticated()
    if not body.files:
        return JSONResponse(status_code=400, content={"error": "No files provided"})
    try:
        gist = await GitHubClient(auth.token, client=http).create_gist(
            body.files, description=body.description, public=body.is_public
        )
    except (GitHubError, httpx.HTTPError) as e:
        logger.error(f"Error creating gist: {e}")
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})
    return {"success": True, "url": gist.get("html_url"), "id": gist.get("id")}
