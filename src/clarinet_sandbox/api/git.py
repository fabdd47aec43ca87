# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

from collections.abc import Awaitable
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger

from clarinet_sandbox.api.deps import get_repository
from clarinet_sandbox.exceptions import GitCommandError
from clarinet_sandbox.models.api import CheckoutRequest, CommitRequest, FilePathRequest
from clarinet_sandbox.vcs import GitRepository

router = APIRouter(prefix="/git")


async def _respond(operation: Awaitable[Any], key: str | None = None) -> Any:
    try:
        value = await operation
    except GitCommandError as e:
        logger.error(f"git failed: {e}")
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})
    if key is None:
        return {"success": True} if value is None else {"success": True, **value}
    return {"success": True, key: value}


@router.get("/status")
async def status(repo: GitRepository = Depends(get_repository)) -> Any:
    return await _respond(repo.status())


@router.post("/stage")
async def stage(body: FilePathRequest, repo: GitRepository = Depends(get_repository)) -> Any:
    return await _respond(repo.stage(body.file_path))


@router.post("/unstage")
async def unstage(body: FilePathRequest, repo: GitRepository = Depends(get_repository)) -> Any:
    return await _respond(repo.unstage(body.file_path))


@router.post("/discard")
async def discard(body: FilePathRequest, repo: GitRepository = Depends(get_repository)) -> Any:
    return await _respond(repo.discard(body.file_path))


@router.post("/commit")
async def commit(body: CommitRequest, repo: GitRepository = Depends(get_repository)) -> Any:
    return await _respond(repo.commit(body.message))


@router.get("/log")
async def log(repo: GitRepository = Depends(get_repository)) -> Any:
    return await _respond(repo.log(), key="commits")


@router.get("/branches")
async def branches(repo: GitRepository = Depends(get_repository)) -> Any:
    return await _respond(repo.branches(), key="branches")


@router.post("/checkout")
async def checkout(body: CheckoutRequest, repo: GitRepository = Depends(get_repository)) -> Any:
    return await _respond(repo.checkout(body.branch, create=body.create))
