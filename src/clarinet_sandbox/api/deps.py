# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

import httpx
from fastapi import Header, Request

from clarinet_sandbox.config import SandboxConfig
from clarinet_sandbox.integrations.compiler import CompilerProxy
from clarinet_sandbox.sandbox import ClarinetSandboxAsync
from clarinet_sandbox.session_manager import DEFAULT_SESSION_ID
from clarinet_sandbox.vcs import GitRepository


def get_config(request: Request) -> SandboxConfig:
    return request.app.state.config


def get_sandbox(request: Request) -> ClarinetSandboxAsync:
    return request.app.state.sandbox


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http


def get_compiler(request: Request) -> CompilerProxy:
    return request.app.state.compiler


def get_repository(request: Request) -> GitRepository:
    return request.app.state.repository


def get_session_id(x_session_id: str | None = Header(default=None)) -> str:
    """Session from the ``X-Session-Id`` header; clients without one share ``default``."""
    return (x_session_id or "").strip() or DEFAULT_SESSION_ID
