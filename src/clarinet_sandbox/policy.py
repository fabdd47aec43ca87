# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

import shlex

TERMINAL_REJECTED_MESSAGE = "Only {tool} commands are allowed."


class CommandRejected(ValueError):
    """A terminal command failed the allow policy and was never run."""


def parse_tool_command(command: str, tool_name: str) -> list[str]:
    """Split a terminal command line into the tool's arguments.

    The command must begin with the tool's canonical name (case-sensitive,
    surrounding whitespace ignored). The line is tokenized like a POSIX shell
    would, but never run through one, so ``;`` or ``&&`` are plain arguments.

    Returns:
        list[str]: The arguments following the tool name.

    Raises:
        CommandRejected: If the command does not invoke the tool or cannot be tokenized.
    """
    stripped = command.strip()
    if not stripped.startswith(tool_name):
        raise CommandRejected(TERMINAL_REJECTED_MESSAGE.format(tool=tool_name))

    try:
        tokens = shlex.split(stripped)
    except ValueError as e:
        raise CommandRejected(f"Invalid command line: {e}") from e

    if not tokens or tokens[0] != tool_name:
        raise CommandRejected(TERMINAL_REJECTED_MESSAGE.format(tool=tool_name))
    return tokens[1:]
