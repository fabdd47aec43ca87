# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import pytest

from clarinet_sandbox.config import SandboxConfig
from clarinet_sandbox.models import Contract, InvocationResult
from clarinet_sandbox.runtime import ToolRuntime
from clarinet_sandbox.sandbox import ClarinetSandboxAsync
from clarinet_sandbox.session_manager import SessionManager


@dataclass
class Call:
    args: list[str]
    cwd: Path
    stdin: str | None
    manifest: str
    contracts: list[str]


class FakeRuntime(ToolRuntime):
    """Records each run and replays scripted results."""

    def __init__(self, results: Sequence[InvocationResult] = (), fault: Exception | None = None):
        self.binary = "/opt/bin/clarinet"
        self.results = list(results)
        self.fault = fault
        self.calls: list[Call] = []

    async def run(self, args: Sequence[str], cwd: Path, stdin: str | None = None) -> InvocationResult:
        manifest = (cwd / "Clarinet.toml").read_text()
        contracts = sorted(p.name for p in (cwd / "contracts").iterdir())
        self.calls.append(Call(list(args), cwd, stdin, manifest, contracts))
        if self.fault is not None:
            raise self.fault
        if self.results:
            return self.results.pop(0)
        return InvocationResult(exit_code=0)


@pytest.fixture
def config(tmp_path: Path) -> SandboxConfig:
    workspace_root = tmp_path / "workspaces"
    workspace_root.mkdir()
    return SandboxConfig(workspace_root=workspace_root, repo_root=tmp_path)


@pytest.fixture
def fake_runtime() -> FakeRuntime:
    return FakeRuntime()


@pytest.fixture
def sandbox(config: SandboxConfig, fake_runtime: FakeRuntime) -> ClarinetSandboxAsync:
    return ClarinetSandboxAsync(
        config,
        runtime=fake_runtime,
        sessions=SessionManager(config, reaper_enabled=False),
    )


@pytest.fixture
def counter_contract() -> Contract:
    return Contract(
        name="counter.clar",
        code="(define-data-var count uint u0)\n(define-public (increment) (ok (var-set count (+ (var-get count) u1))))",
    )
