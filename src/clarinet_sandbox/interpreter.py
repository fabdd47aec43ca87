# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

"""Best-effort decoding of Clarinet's plain-text output.

Clarinet has no machine-readable mode for ``check`` or ``console``, so results
are recovered from text. Decoding is layered: every line is classified first,
then matchers run in priority order, and a fixed placeholder is returned when
none of them applies. No decoder raises on unexpected output.
"""

import re
from collections.abc import Callable, Sequence
from enum import Enum

from clarinet_sandbox.models import InterpretedResult, InvocationResult, StateEntry

PROMPT_PREFIX = ">>"
BANNER_MARKER = "Clarinet"
ASSET_MARKER = "Asset balance"
ERROR_MARKER = "error:"

CHECK_FAILED_MESSAGE = "Check failed"
ERROR_PLACEHOLDER = "Error occurred"
SUCCESS_PLACEHOLDER = "Success"
COMMAND_FAILED_MESSAGE = "Command failed"

_ERROR_PATTERN = re.compile(r"error: .+")
_ASSET_PATTERN = re.compile(r"Asset balance (.+): (.+)")


class LineKind(Enum):
    BLANK = "blank"
    PROMPT = "prompt"
    ASSET = "asset"
    BANNER = "banner"
    ERROR = "error"
    OUTPUT = "output"


def classify_line(line: str) -> LineKind:
    """Assign a single line of console output to a LineKind."""
    if not line.strip():
        return LineKind.BLANK
    if line.startswith(PROMPT_PREFIX):
        return LineKind.PROMPT
    if ASSET_MARKER in line:
        return LineKind.ASSET
    if BANNER_MARKER in line:
        return LineKind.BANNER
    if ERROR_MARKER in line or "syntax error" in line:
        return LineKind.ERROR
    return LineKind.OUTPUT


def is_error_text(text: str) -> bool:
    """Evaluation results mentioning ``error`` in any case count as failures."""
    return "error" in text.lower()


# Evaluation matchers take (output, lines, expression) and return the result
# line, or None to defer to the next matcher.
Matcher = Callable[[str, list[str], str], str | None]


def match_error_marker(output: str, lines: list[str], expression: str) -> str | None:
    """The last ``error: ...`` fragment, whenever the output mentions ``error:``."""
    if ERROR_MARKER not in output:
        return None
    matches = _ERROR_PATTERN.findall(output)
    return matches[-1] if matches else ERROR_PLACEHOLDER


def match_echoed_prompt(output: str, lines: list[str], expression: str) -> str | None:
    """The line after the console echo of ``>> <expression>``."""
    needle = f"{PROMPT_PREFIX} {expression}"
    for index, line in enumerate(lines):
        if needle in line:
            if index + 1 < len(lines) and lines[index + 1]:
                return lines[index + 1].strip()
            return None
    return None


def match_last_output_line(output: str, lines: list[str], expression: str) -> str | None:
    """The last line that is not blank, a prompt, a banner or an asset dump."""
    candidates = [line for line in lines if classify_line(line) in (LineKind.OUTPUT, LineKind.ERROR)]
    return candidates[-1].strip() if candidates else None


EVALUATION_MATCHERS: tuple[Matcher, ...] = (
    match_error_marker,
    match_echoed_prompt,
    match_last_output_line,
)


class OutputInterpreter:
    """Turns an InvocationResult into an InterpretedResult for each operation kind."""

    def __init__(self, evaluation_matchers: Sequence[Matcher] = EVALUATION_MATCHERS):
        self.evaluation_matchers = tuple(evaluation_matchers)

    def check(self, invocation: InvocationResult) -> InterpretedResult:
        """Static check: the exit status decides, diagnostics come from marked lines."""
        output = invocation.combined_output
        if invocation.exit_succeeded:
            return InterpretedResult(success=True, raw_output=output)

        errors = invocation.error_lines or [CHECK_FAILED_MESSAGE]
        return InterpretedResult(success=False, message=errors[0], raw_output=output, errors=errors)

    def evaluate(self, invocation: InvocationResult, expression: str) -> InterpretedResult:
        """Expression evaluation: the exit status is ignored, the result text decides."""
        output = invocation.combined_output
        lines = output.split("\n")

        result = SUCCESS_PLACEHOLDER
        for matcher in self.evaluation_matchers:
            matched = matcher(output, lines, expression)
            if matched is not None:
                result = matched
                break

        return InterpretedResult(success=not is_error_text(result), message=result, raw_output=output)

    def state(self, invocation: InvocationResult) -> InterpretedResult:
        """State inspection: collect every asset balance, in output order."""
        output = invocation.combined_output
        state: list[StateEntry] = []
        for line in output.split("\n"):
            if classify_line(line) is not LineKind.ASSET:
                continue
            match = _ASSET_PATTERN.search(line)
            if match:
                state.append(StateEntry(name=match.group(1), value=match.group(2).strip()))

        return InterpretedResult(success=True, raw_output=output, state=state)

    def terminal(self, invocation: InvocationResult, command: str = "") -> InterpretedResult:
        """Terminal passthrough: no decoding, the output is shown as is.

        A failed run with no output reports the command that failed.
        """
        output = invocation.combined_output
        message = output
        if not invocation.exit_succeeded and not output:
            message = f"{COMMAND_FAILED_MESSAGE}: {command}" if command else COMMAND_FAILED_MESSAGE
        return InterpretedResult(success=invocation.exit_succeeded, message=message, raw_output=output)
