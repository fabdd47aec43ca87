# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class SandboxConfig(BaseSettings):
    """
    Configuration for the Clarinet sandbox service.
    """

    tool_name: str = "clarinet"
    # Overrides the bin/ directory next to the installed package.
    bin_dir: Path | None = None

    execution_timeout: float = 300.0  # check/console runs can take minutes
    idle_timeout: float = 3600.0
    reaper_interval: float = 60.0
    workspace_root: Path | None = None

    deployer: str = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
    block_height: int = 1

    # HTTP
    host: str = "0.0.0.0"
    port: int = 5001
    cors_origins: list[str] = [
        "http://localhost:3000",
        "https://lab-stx-ide.vercel.app",
    ]

    # GitHub OAuth / proxy
    github_client_id: str | None = None
    github_client_secret: str | None = None
    public_url: str = "http://localhost:3000"
    frontend_url: str = "http://localhost:3000"

    # Remote compiler
    compiler_service_url: str = "http://20.193.142.1:8080"
    compile_timeout: float = 300.0

    # Version control wrappers
    repo_root: Path = Path.cwd()

    model_config = SettingsConfigDict(
        env_prefix="CLARINET_SANDBOX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
