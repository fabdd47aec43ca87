# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from clarinet_sandbox.api import clarity, compiler, git, github
from clarinet_sandbox.config import SandboxConfig
from clarinet_sandbox.integrations.compiler import CompilerProxy
from clarinet_sandbox.sandbox import ClarinetSandboxAsync
from clarinet_sandbox.vcs import GitRepository

API_PREFIX = "/ide-api"


def create_app(
    config: SandboxConfig | None = None,
    sandbox: ClarinetSandboxAsync | None = None,
    http: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Build the IDE backend application.

    Args:
        config: Service configuration. Loaded from the environment when omitted.
        sandbox: Orchestrator for Clarinet runs. Built from config when omitted.
        http: Shared client for GitHub and the compiler service.

    Returns:
        FastAPI: The configured application.
    """
    config = config or SandboxConfig()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Clarinet sandbox API starting", tool=app.state.sandbox.runtime.binary)
        yield
        await app.state.sandbox.shutdown()
        await app.state.http.aclose()
        logger.info("Clarinet sandbox API stopped")

    app = FastAPI(title="Clarinet Sandbox", version="0.1.0", lifespan=lifespan)
    app.state.config = config
    app.state.sandbox = sandbox or ClarinetSandboxAsync(config)
    app.state.http = http or httpx.AsyncClient(timeout=30.0)
    app.state.compiler = CompilerProxy(
        config.compiler_service_url, timeout=config.compile_timeout, client=app.state.http
    )
    app.state.repository = GitRepository(config.repo_root)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for module in (clarity, github, git, compiler):
        app.include_router(module.router, prefix=API_PREFIX)
    return app
