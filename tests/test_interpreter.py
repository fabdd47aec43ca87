# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

import pytest

from clarinet_sandbox.interpreter import (
    CHECK_FAILED_MESSAGE,
    ERROR_PLACEHOLDER,
    SUCCESS_PLACEHOLDER,
    LineKind,
    OutputInterpreter,
    classify_line,
    match_echoed_prompt,
    match_error_marker,
    match_last_output_line,
)
from clarinet_sandbox.models import InvocationResult, StateEntry

CONSOLE_BANNER = "clarity-repl v2.11.0\nEnter \"::help\" for usage hints.\nConnected to a transient in-memory database.\n"


@pytest.fixture
def interpreter() -> OutputInterpreter:
    return OutputInterpreter()


def run(stdout: str = "", stderr: str = "", exit_code: int = 0) -> InvocationResult:
    return InvocationResult(exit_code=exit_code, stdout=stdout, stderr=stderr)


@pytest.mark.parametrize(
    "line,kind",
    [
        ("", LineKind.BLANK),
        ("   ", LineKind.BLANK),
        (">> (+ 1 2)", LineKind.PROMPT),
        ("Asset balance STX: 100", LineKind.ASSET),
        ("Clarinet 2.11.0", LineKind.BANNER),
        ("error: unknown symbol", LineKind.ERROR),
        ("x.clar: syntax error", LineKind.ERROR),
        ("u3", LineKind.OUTPUT),
    ],
)
def test_classify_line(line: str, kind: LineKind) -> None:
    assert classify_line(line) is kind


# Static check


def test_check_success_ignores_output_text(interpreter: OutputInterpreter) -> None:
    result = interpreter.check(run(stdout="✔ 1 contract checked\n"))
    assert result.success
    assert result.errors == []
    assert result.raw_output == "✔ 1 contract checked\n"


def test_check_failure_extracts_marked_lines(interpreter: OutputInterpreter) -> None:
    output = "checking counter\nerror: use of unresolved function 'foo'\n--> contracts/counter.clar:3:4\n"
    result = interpreter.check(run(stderr=output, exit_code=1))

    assert not result.success
    assert result.errors == ["error: use of unresolved function 'foo'"]
    assert result.message == "error: use of unresolved function 'foo'"
    assert result.raw_output == output


def test_check_failure_without_markers_uses_generic_message(interpreter: OutputInterpreter) -> None:
    result = interpreter.check(run(stderr="thread 'main' panicked\n", exit_code=101))
    assert not result.success
    assert result.errors == [CHECK_FAILED_MESSAGE]


# Expression evaluation


def test_evaluate_reads_line_after_echoed_prompt(interpreter: OutputInterpreter) -> None:
    output = CONSOLE_BANNER + ">> (+ 2 2)\n  u4  \n>> ::get_assets\n"
    result = interpreter.evaluate(run(stdout=output), "(+ 2 2)")
    assert result.success
    assert result.message == "u4"


def test_evaluate_error_marker_wins_regardless_of_exit_code(interpreter: OutputInterpreter) -> None:
    output = ">> (+ 1 2)\nu3\n>> (foo)\nerror: use of unresolved function 'foo'\nerror: foo\n"
    result = interpreter.evaluate(run(stdout=output, exit_code=0), "(foo)")
    assert not result.success
    assert result.message == "error: foo"


def test_evaluate_error_marker_in_stderr(interpreter: OutputInterpreter) -> None:
    result = interpreter.evaluate(run(stdout=">> (bad\n", stderr="error: expected ')'\n"), "(bad")
    assert not result.success
    assert result.message == "error: expected ')'"


def test_evaluate_bare_error_marker_falls_back_to_placeholder(interpreter: OutputInterpreter) -> None:
    result = interpreter.evaluate(run(stdout="error:\n"), "(x)")
    assert result.message == ERROR_PLACEHOLDER
    assert not result.success


def test_evaluate_falls_back_to_last_output_line(interpreter: OutputInterpreter) -> None:
    output = "Clarinet console\n(ok true)\n\nAsset balance STX: 100\n>> ::get_assets\n"
    result = interpreter.evaluate(run(stdout=output), "(contract-call? .counter increment)")
    assert result.success
    assert result.message == "(ok true)"


def test_evaluate_empty_output_is_generic_success(interpreter: OutputInterpreter) -> None:
    result = interpreter.evaluate(run(stdout=""), "(+ 1 1)")
    assert result.success
    assert result.message == SUCCESS_PLACEHOLDER


def test_evaluate_result_mentioning_error_is_a_failure(interpreter: OutputInterpreter) -> None:
    output = ">> (unwrap-panic none)\nRuntime Error: unwrap failed\n"
    result = interpreter.evaluate(run(stdout=output), "(unwrap-panic none)")
    assert not result.success
    assert result.message == "Runtime Error: unwrap failed"


def test_evaluate_err_response_is_not_an_error(interpreter: OutputInterpreter) -> None:
    result = interpreter.evaluate(run(stdout=">> (err u1)\n(err u1)\n"), "(err u1)")
    assert result.success
    assert result.message == "(err u1)"


def test_evaluate_ignores_nonzero_exit(interpreter: OutputInterpreter) -> None:
    result = interpreter.evaluate(run(stdout=">> (+ 1 1)\nu2\n", exit_code=1), "(+ 1 1)")
    assert result.success


def test_matchers_defer_when_not_applicable() -> None:
    lines = ["Clarinet", ">> ::get_assets", ""]
    assert match_error_marker("no problems", lines, "(x)") is None
    assert match_echoed_prompt("", lines, "(x)") is None
    assert match_last_output_line("", lines, "(x)") is None


def test_echoed_prompt_with_blank_next_line_defers() -> None:
    assert match_echoed_prompt("", [">> (x)", ""], "(x)") is None


def test_custom_matcher_order() -> None:
    interpreter = OutputInterpreter(evaluation_matchers=[match_last_output_line])
    result = interpreter.evaluate(run(stdout=">> (x)\nu1\nu2\n"), "(x)")
    assert result.message == "u2"


# State inspection


def test_state_collects_balances_in_order(interpreter: OutputInterpreter) -> None:
    output = ">> ::get_assets\nAsset balance X: 100\nsomething else\nAsset balance Y: 50\n"
    result = interpreter.state(run(stdout=output))

    assert result.success
    assert result.state == [
        StateEntry(name="X", type="asset", value="100"),
        StateEntry(name="Y", type="asset", value="50"),
    ]
    assert [entry.model_dump() for entry in result.state] == [
        {"name": "X", "type": "asset", "value": "100"},
        {"name": "Y", "type": "asset", "value": "50"},
    ]


def test_state_without_balances_is_empty_success(interpreter: OutputInterpreter) -> None:
    result = interpreter.state(run(stdout="no assets\n", exit_code=1))
    assert result.success
    assert result.state == []


def test_state_trims_carriage_returns(interpreter: OutputInterpreter) -> None:
    result = interpreter.state(run(stdout="Asset balance .counter.token: 7\r\n"))
    assert result.state == [StateEntry(name=".counter.token", value="7")]


# Terminal passthrough


def test_terminal_passes_output_through(interpreter: OutputInterpreter) -> None:
    result = interpreter.terminal(run(stdout="clarinet 2.11.0\n", stderr="warn\n"))
    assert result.success
    assert result.message == "clarinet 2.11.0\nwarn\n"


def test_terminal_nonzero_exit_is_failure(interpreter: OutputInterpreter) -> None:
    result = interpreter.terminal(run(stderr="error: unknown subcommand\n", exit_code=2))
    assert not result.success
    assert result.message == "error: unknown subcommand\n"


def test_terminal_failure_without_output(interpreter: OutputInterpreter) -> None:
    result = interpreter.terminal(run(exit_code=1), "clarinet check")
    assert not result.success
    assert result.message == "Command failed: clarinet check"
    assert result.raw_output == ""


def test_terminal_success_without_output_stays_empty(interpreter: OutputInterpreter) -> None:
    result = interpreter.terminal(run(), "clarinet check")
    assert result.success
    assert result.message == ""
