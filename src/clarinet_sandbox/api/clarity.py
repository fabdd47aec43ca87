# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from clarinet_sandbox.api.deps import get_config, get_sandbox, get_session_id
from clarinet_sandbox.config import SandboxConfig
from clarinet_sandbox.exceptions import SandboxError
from clarinet_sandbox.models import Contract
from clarinet_sandbox.models.api import (
    CheckResponse,
    ContractRequest,
    ExecuteRequest,
    ExecuteResponse,
    HealthResponse,
    StateRequest,
    StateResponse,
    SuccessResponse,
    TerminalRequest,
    TerminalResponse,
)
from clarinet_sandbox.sandbox import ClarinetSandboxAsync

router = APIRouter()


def _to_contract(body: ContractRequest) -> Contract:
    try:
        return Contract(name=body.name, code=body.code)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False)) from e


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="ok", engine="Clarinet CLI")


@router.post("/clarity/check", response_model=CheckResponse)
async def check(body: ContractRequest, sandbox: ClarinetSandboxAsync = Depends(get_sandbox)) -> Any:
    contract = _to_contract(body)
    try:
        result = await sandbox.check(contract)
    except (SandboxError, ValueError) as e:
        logger.error(f"Check failed for {contract.name}: {e}")
        return JSONResponse(status_code=500, content={"success": False, "errors": [str(e)]})
    return CheckResponse(success=result.success, output=result.raw_output, errors=result.errors)


@router.post("/clarity/deploy", response_model=SuccessResponse)
async def deploy(
    body: ContractRequest,
    sandbox: ClarinetSandboxAsync = Depends(get_sandbox),
    session_id: str = Depends(get_session_id),
) -> SuccessResponse:
    await sandbox.set_active(_to_contract(body), session_id)
    return SuccessResponse(success=True)


@router.post("/clarity/execute", response_model=ExecuteResponse)
async def execute(
    body: ExecuteRequest,
    sandbox: ClarinetSandboxAsync = Depends(get_sandbox),
    session_id: str = Depends(get_session_id),
) -> Any:
    try:
        result = await sandbox.evaluate(body.snippet, session_id)
    except SandboxError as e:
        logger.error(f"Execute failed: {e}")
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})
    return ExecuteResponse(success=result.success, result=result.message)


@router.post("/clarity/state", response_model=StateResponse)
async def state(
    body: StateRequest | None = None,
    sandbox: ClarinetSandboxAsync = Depends(get_sandbox),
    config: SandboxConfig = Depends(get_config),
    session_id: str = Depends(get_session_id),
) -> Any:
    # contractName is accepted for compatibility; balances cover the whole console.
    try:
        result = await sandbox.inspect_state(session_id)
    except SandboxError as e:
        logger.error(f"State inspection failed: {e}")
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})
    return StateResponse(
        success=True,
        state=result.state,
        block_height=config.block_height,
        deployer=config.deployer,
    )


@router.post("/clarity/terminal", response_model=TerminalResponse)
async def terminal(
    body: TerminalRequest,
    sandbox: ClarinetSandboxAsync = Depends(get_sandbox),
    session_id: str = Depends(get_session_id),
) -> TerminalResponse:
    try:
        result = await sandbox.terminal(body.command, session_id)
    except SandboxError as e:
        return TerminalResponse(success=False, output=str(e))
    return TerminalResponse(success=result.success, output=result.message)


@router.post("/clarity/reset", response_model=SuccessResponse)
async def reset(
    sandbox: ClarinetSandboxAsync = Depends(get_sandbox),
    session_id: str = Depends(get_session_id),
) -> SuccessResponse:
    await sandbox.reset(session_id)
    return SuccessResponse(success=True)
