# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

import shutil
import subprocess
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest
from loguru import logger

from clarinet_sandbox.exceptions import GitCommandError
from clarinet_sandbox.vcs import GitRepository, branch_from_refs, parse_log, parse_status


def test_parse_status() -> None:
    porcelain = "M  staged.clar\n M modified.clar\nMM both.clar\n?? new.clar\n D gone.clar\n"

    assert parse_status(porcelain) == {
        "modifiedFiles": ["modified.clar", "both.clar", "new.clar", "gone.clar"],
        "stagedFiles": ["staged.clar", "both.clar"],
        "untrackedFiles": ["new.clar"],
    }


def test_parse_status_clean() -> None:
    assert parse_status("") == {"modifiedFiles": [], "stagedFiles": [], "untrackedFiles": []}


@pytest.mark.parametrize(
    "refs,branch",
    [
        ("", "main"),
        ("HEAD -> feature/login, origin/feature/login", "feature/login"),
        ("origin/base/release", "release"),
        ("tag: v1.0", "main"),
    ],
)
def test_branch_from_refs(refs: str, branch: str) -> None:
    assert branch_from_refs(refs) == branch


def test_parse_log() -> None:
    output = "abcdef1234567\x1fAlice\x1f1700000000\x1finit: project\x1fHEAD -> main\nfedcba7654321\x1fBob\x1f1600000000\x1ffix\x1f\n"

    commits = parse_log(output)

    assert commits[0] == {
        "id": "abcdef1234567",
        "hash": "abcdef1",
        "author": "Alice",
        "date": 1700000000000,
        "message": "init: project",
        "branch": "main",
    }
    assert commits[1]["branch"] == "main"
    assert commits[1]["author"] == "Bob"


def completed(stdout: str = "", returncode: int = 0, stderr: str = "") -> subprocess.CompletedProcess[bytes]:
    return subprocess.CompletedProcess(["git"], returncode, stdout.encode(), stderr.encode())


@pytest.mark.asyncio
async def test_commands_use_argument_vectors(tmp_path: Path) -> None:
    repo = GitRepository(tmp_path)
    with patch("clarinet_sandbox.vcs.anyio.run_process", new=AsyncMock(return_value=completed())) as run:
        await repo.stage("-rf; rm x")
        await repo.unstage("a.clar")
        await repo.discard("a.clar")
        await repo.commit("first commit")
        await repo.checkout("dev", create=True)
        await repo.checkout("main")

    argv = [call.args[0] for call in run.await_args_list]
    assert argv == [
        ["git", "add", "--", "-rf; rm x"],
        ["git", "restore", "--staged", "--", "a.clar"],
        ["git", "restore", "--", "a.clar"],
        ["git", "commit", "-m", "first commit"],
        ["git", "checkout", "-b", "dev"],
        ["git", "checkout", "main"],
    ]
    assert all(call.kwargs["cwd"] == tmp_path for call in run.await_args_list)


@pytest.mark.asyncio
async def test_status_combines_branch(tmp_path: Path) -> None:
    outputs = [completed("?? a.clar\n"), completed("main\n")]
    with patch("clarinet_sandbox.vcs.anyio.run_process", new=AsyncMock(side_effect=outputs)):
        status = await GitRepository(tmp_path).status()

    assert status == {"branch": "main", "modifiedFiles": ["a.clar"], "stagedFiles": [], "untrackedFiles": ["a.clar"]}


@pytest.mark.asyncio
async def test_branches(tmp_path: Path) -> None:
    with patch("clarinet_sandbox.vcs.anyio.run_process", new=AsyncMock(return_value=completed("main\ndev\n"))):
        assert await GitRepository(tmp_path).branches() == ["main", "dev"]


@pytest.mark.asyncio
async def test_nonzero_exit_raises(tmp_path: Path) -> None:
    failure = completed(returncode=1, stderr="nothing to commit\n")
    with patch("clarinet_sandbox.vcs.anyio.run_process", new=AsyncMock(return_value=failure)):
        with pytest.raises(GitCommandError, match="nothing to commit") as exc_info:
            await GitRepository(tmp_path).commit("empty")

    assert exc_info.value.returncode == 1
    assert exc_info.value.stderr == "nothing to commit\n"


@pytest.mark.asyncio
async def test_missing_git_raises(tmp_path: Path) -> None:
    repo = GitRepository(tmp_path, git=str(tmp_path / "no-git"))
    with pytest.raises(GitCommandError, match="Failed to launch git"):
        await repo.branches()


@pytest.mark.asyncio
@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
async def test_real_repository(tmp_path: Path) -> None:
    subprocess.run(["git", "init", "-q", str(tmp_path)], check=True)
    (tmp_path / "a.clar").write_text("(ok u1)")
    repo = GitRepository(tmp_path)

    before = await repo.status()
    await repo.stage("a.clar")
    after = await repo.status()

    assert before["untrackedFiles"] == ["a.clar"]
    assert after["stagedFiles"] == ["a.clar"]
    assert after["untrackedFiles"] == []


@pytest.mark.asyncio
async def test_commit_message_with_braces(tmp_path: Path) -> None:
    records: list[Any] = []
    sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    try:
        with patch("clarinet_sandbox.vcs.anyio.run_process", new=AsyncMock(return_value=completed())) as run:
            await GitRepository(tmp_path).commit("store {id: u1} in map")
    finally:
        logger.remove(sink_id)

    assert run.await_args.args[0] == ["git", "commit", "-m", "store {id: u1} in map"]
    assert records[0]["message"] == "Running git"
    assert records[0]["extra"]["argv"] == ["git", "commit", "-m", "store {id: u1} in map"]
