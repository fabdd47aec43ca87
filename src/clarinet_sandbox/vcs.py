# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

import re
from pathlib import Path
from typing import Any

import anyio
from loguru import logger

from clarinet_sandbox.exceptions import GitCommandError

LOG_LIMIT = 20
_FIELD_SEP = "\x1f"
_LOG_FORMAT = _FIELD_SEP.join(["%H", "%an", "%at", "%s", "%D"])
_ARROW_BRANCH = re.compile(r"-> ([\w/-]+)")
_BASE_BRANCH = re.compile(r"base/([\w/-]+)")


def parse_status(porcelain: str) -> dict[str, list[str]]:
    """Split ``git status --porcelain`` output into modified, staged and untracked files.

    Untracked files are also reported as modified.
    """
    modified: list[str] = []
    staged: list[str] = []
    untracked: list[str] = []
    for line in filter(None, porcelain.split("\n")):
        status, path = line[:2], line[3:].strip()
        if status == "??":
            untracked.append(path)
            modified.append(path)
            continue
        if status[0] != " ":
            staged.append(path)
        if status[1] in ("M", "D"):
            modified.append(path)
    return {"modifiedFiles": modified, "stagedFiles": staged, "untrackedFiles": untracked}


def branch_from_refs(refs: str) -> str:
    if not refs:
        return "main"
    match = _ARROW_BRANCH.search(refs) or _BASE_BRANCH.search(refs)
    if match:
        return match.group(1)
    if "HEAD" in refs:
        return refs.split(", ")[0].replace("HEAD -> ", "").strip() or "main"
    return "main"


def parse_log(output: str) -> list[dict[str, Any]]:
    commits = []
    for line in filter(None, output.split("\n")):
        commit_hash, author, timestamp, message, refs = (line.split(_FIELD_SEP) + [""] * 5)[:5]
        commits.append(
            {
                "id": commit_hash,
                "hash": commit_hash[:7],
                "author": author,
                "date": int(timestamp or 0) * 1000,
                "message": message,
                "branch": branch_from_refs(refs),
            }
        )
    return commits


class GitRepository:
    """Runs git commands against the IDE's working copy.

    Arguments are passed as a vector, never through a shell.
    """

    def __init__(self, root: Path, git: str = "git"):
        self.root = root
        self.git = git

    async def _git(self, *args: str) -> str:
        cmd = [self.git, *args]
        logger.debug("Running git", argv=cmd, cwd=str(self.root))
        try:
            completed = await anyio.run_process(cmd, cwd=self.root, check=False)
        except OSError as e:
            raise GitCommandError(f"Failed to launch git: {e}") from e

        stdout = completed.stdout.decode("utf-8", errors="replace")
        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace")
            raise GitCommandError(
                f"Command failed: {' '.join(cmd)}\n{stderr}".strip(),
                returncode=completed.returncode,
                stderr=stderr,
            )
        return stdout

    async def status(self) -> dict[str, Any]:
        porcelain = await self._git("status", "--porcelain")
        branch = await self._git("branch", "--show-current")
        return {"branch": branch.strip(), **parse_status(porcelain)}

    async def stage(self, file_path: str) -> None:
        await self._git("add", "--", file_path)

    async def unstage(self, file_path: str) -> None:
        await self._git("restore", "--staged", "--", file_path)

    async def discard(self, file_path: str) -> None:
        await self._git("restore", "--", file_path)

    async def commit(self, message: str) -> None:
        await self._git("commit", "-m", message)

    async def log(self, limit: int = LOG_LIMIT) -> list[dict[str, Any]]:
        output = await self._git("log", "-n", str(limit), f"--pretty=format:{_LOG_FORMAT}", "--all")
        return parse_log(output)

    async def branches(self) -> list[str]:
        output = await self._git("branch", "--format=%(refname:short)")
        return [line for line in output.split("\n") if line]

    async def checkout(self, branch: str, create: bool = False) -> None:
        if create:
            await self._git("checkout", "-b", branch)
        else:
            await self._git("checkout", branch)
