# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

import shutil
import tempfile
import time
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from pathlib import Path

import aiofiles  # type: ignore[import-untyped]
import anyio
from loguru import logger

from clarinet_sandbox.exceptions import WorkspaceCreationFailed
from clarinet_sandbox.models import Contract

MANIFEST_FILE = "Clarinet.toml"
CONTRACTS_DIR = "contracts"
SETTINGS_DIR = "settings"
NETWORK_PROFILES = ("Simnet", "Devnet")

MANIFEST_HEADER = """[project]
name = "temp-project"
authors = []
description = ""
telemetry = false
[repl]
costs_version = 2
purify_stack = true
show_costs = false
"""

# Clarinet's default devnet mnemonics. Both profiles get the same accounts.
NETWORK_SETTINGS = """[network]
name = "simnet"

[accounts.deployer]
mnemonic = "twice kind fence tip hidden tilt action fragile skin nothing glory cousin green tomorrow spring wrist shed math olympic multiply hip blue scout claw"
balance = 100000000000000

[accounts.wallet_1]
mnemonic = "sell invite acquire kitten bamboo drastic jelly vivid peace spawn twice guilt pave pen trash pretty park cube fragile unaware remain midnight betray rebuild"
balance = 100000000000000
"""


def render_manifest(contracts: Sequence[Contract]) -> str:
    """Render Clarinet.toml with one entry per contract and no dependencies."""
    manifest = MANIFEST_HEADER
    for contract in contracts:
        name = contract.project_name
        manifest += (
            f"\n[contracts.{name}]\n"
            f'path = "{CONTRACTS_DIR}/{name}.clar"\n'
            'summary = ""\n'
            "depends_on = []\n"
        )
    return manifest


class WorkspaceFactory:
    """Builds throwaway Clarinet projects, one per tool invocation."""

    def __init__(self, root: Path | None = None):
        """Initializes the WorkspaceFactory.

        Args:
            root: Directory that holds the workspaces. Defaults to the system temp dir.
        """
        self.root = root

    async def create(self, contracts: Sequence[Contract]) -> Path:
        """Materialize a project containing the given contracts.

        Args:
            contracts: Contracts to write, in manifest order. May be empty.

        Returns:
            Path: The project root.

        Raises:
            ValueError: If two contracts map to the same project name.
            WorkspaceCreationFailed: If any directory or file cannot be written.
        """
        names = [c.project_name for c in contracts]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate contract names: {names}")

        try:
            # time_ns orders workspaces, mkdtemp keeps concurrent ones apart
            root = Path(tempfile.mkdtemp(prefix=f"clarinet-{time.time_ns()}-", dir=self.root))
        except OSError as e:
            raise WorkspaceCreationFailed(f"Failed to create workspace: {e}") from e

        try:
            (root / CONTRACTS_DIR).mkdir()
            (root / SETTINGS_DIR).mkdir()

            for contract in contracts:
                await self._write(root / CONTRACTS_DIR / f"{contract.project_name}.clar", contract.code)

            await self._write(root / MANIFEST_FILE, render_manifest(contracts))
            for profile in NETWORK_PROFILES:
                await self._write(root / SETTINGS_DIR / f"{profile}.toml", NETWORK_SETTINGS)
        except OSError as e:
            await self.destroy(root)
            raise WorkspaceCreationFailed(f"Failed to populate workspace {root}: {e}") from e

        logger.debug("Created workspace", path=str(root), contracts=names)
        return root

    async def _write(self, path: Path, content: str) -> None:
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(content)

    async def destroy(self, path: Path) -> None:
        """Remove a workspace. Failures are logged, never raised."""
        try:
            await anyio.to_thread.run_sync(shutil.rmtree, path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to remove workspace {path}: {e}")

    @asynccontextmanager
    async def workspace(self, contracts: Sequence[Contract]) -> AsyncIterator[Path]:
        """Create a workspace and remove it on every exit path, including cancellation."""
        root = await self.create(contracts)
        try:
            yield root
        finally:
            with anyio.CancelScope(shield=True):
                await self.destroy(root)
