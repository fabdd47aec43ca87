# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

import functools
import shutil
import time
from collections.abc import Sequence
from pathlib import Path

import anyio
from loguru import logger

from clarinet_sandbox.exceptions import InvocationFault
from clarinet_sandbox.models import InvocationResult
from clarinet_sandbox.runtime import ToolRuntime

# bin/ next to the installed package, where the installer puts the binary
PACKAGE_BIN_DIR = Path(__file__).resolve().parent.parent / "bin"


@functools.lru_cache(maxsize=None)
def resolve_binary(tool_name: str = "clarinet", bin_dir: Path | None = None) -> str:
    """Locate the tool executable once per process.

    Precedence: the install-adjacent bin directory, then ``./bin`` under the
    working directory, then the executable search path. Falls back to the
    bare name so the failure surfaces at launch time.
    """
    candidates = [
        (bin_dir or PACKAGE_BIN_DIR) / tool_name,
        Path.cwd() / "bin" / tool_name,
    ]
    for candidate in candidates:
        if candidate.exists():
            resolved = str(candidate)
            break
    else:
        resolved = shutil.which(tool_name) or tool_name

    logger.info(f"Using {tool_name} command: {resolved}")
    return resolved


def _decode(data: bytes | None) -> str:
    return data.decode("utf-8", errors="replace") if data else ""


class ClarinetRuntime(ToolRuntime):
    """
    Runs the Clarinet CLI as a local subprocess.
    """

    def __init__(self, binary: str, timeout: float = 300.0):
        self.binary = binary
        self.timeout = timeout

    async def run(self, args: Sequence[str], cwd: Path, stdin: str | None = None) -> InvocationResult:
        """
        Run the binary in the workspace and capture its output.
        """
        cmd = [self.binary, *args]
        logger.info("Running tool", argv=cmd, cwd=str(cwd))

        start_time = time.time()
        try:
            with anyio.fail_after(self.timeout):
                completed = await anyio.run_process(
                    cmd,
                    input=stdin.encode("utf-8") if stdin is not None else None,
                    cwd=cwd,
                    check=False,
                )
        except TimeoutError as e:
            logger.error(f"{cmd[0]} exceeded {self.timeout} seconds")
            raise InvocationFault(f"Execution exceeded {self.timeout} seconds limit.") from e
        except OSError as e:
            logger.error(f"Failed to launch {cmd[0]}: {e}")
            raise InvocationFault(f"Failed to launch {cmd[0]}: {e}") from e

        return InvocationResult(
            exit_code=completed.returncode,
            stdout=_decode(completed.stdout),
            stderr=_decode(completed.stderr),
            execution_duration=time.time() - start_time,
        )
