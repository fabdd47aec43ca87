# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path

from clarinet_sandbox.models import InvocationResult


class ToolRuntime(ABC):
    """
    Abstract base class for running the contract toolchain.
    Follows the Strategy Pattern.
    """

    binary: str

    @abstractmethod
    async def run(self, args: Sequence[str], cwd: Path, stdin: str | None = None) -> InvocationResult:
        """Run the tool and capture its output.

        Runs ``<binary> <args>`` inside ``cwd``. A non-zero exit is a normal
        outcome and is reported in the result, not raised.

        Args:
            args: Subcommand and arguments, without the binary.
            cwd: The workspace root to run in.
            stdin: Optional text piped to the process's standard input.

        Returns:
            InvocationResult: Exit status plus captured stdout and stderr.

        Raises:
            InvocationFault: If the process cannot be launched or exceeds the timeout.
        """
        pass  # pragma: no cover
