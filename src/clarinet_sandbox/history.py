# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

from collections.abc import Iterator, Sequence

GET_ASSETS_DIRECTIVE = "::get_assets"


def build_replay_script(history: Sequence[str], expression: str | None = None) -> str:
    """Console input replaying ``history``, then ``expression``, then an asset dump."""
    lines = list(history)
    if expression is not None:
        lines.append(expression)
    lines.append(GET_ASSETS_DIRECTIVE)
    return "\n".join(lines) + "\n"


class ReplHistory:
    """Ordered log of console expressions that evaluated without error."""

    def __init__(self) -> None:
        self._entries: list[str] = []

    def append(self, expression: str) -> None:
        self._entries.append(expression)

    def snapshot(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.snapshot())
