# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

from typing import Literal

from pydantic import BaseModel, Field

ERROR_TOKENS = ("error:", "syntax error")


class InvocationResult(BaseModel):
    """Raw evidence from one run of the tool.

    Attributes:
        exit_code: The process exit status.
        stdout: Standard output captured from the process.
        stderr: Standard error captured from the process.
        execution_duration: Wall time of the run in seconds.
    """

    exit_code: int
    stdout: str = ""
    stderr: str = ""
    execution_duration: float = 0.0

    @property
    def exit_succeeded(self) -> bool:
        return self.exit_code == 0

    @property
    def combined_output(self) -> str:
        return self.stdout + self.stderr

    @property
    def error_lines(self) -> list[str]:
        """Lines of the combined output carrying a diagnostic token."""
        return [
            line
            for line in self.combined_output.split("\n")
            if any(token in line for token in ERROR_TOKENS)
        ]


class StateEntry(BaseModel):
    name: str
    type: Literal["asset"] = "asset"
    value: str


class InterpretedResult(BaseModel):
    """The classified outcome of an operation, returned to the HTTP boundary.

    Attributes:
        success: Best-effort success classification.
        message: The most relevant line (evaluation result, or first diagnostic).
        raw_output: The combined tool output.
        errors: Extracted diagnostic lines (static check).
        state: Asset balances (state inspection).
    """

    success: bool
    message: str = ""
    raw_output: str = ""
    errors: list[str] = Field(default_factory=list)
    state: list[StateEntry] = Field(default_factory=list)
