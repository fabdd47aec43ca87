# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

import uvicorn
from mcp.server.fastmcp import FastMCP
from mcp.types import TextContent
from pydantic import ValidationError

from clarinet_sandbox.api import create_app
from clarinet_sandbox.config import SandboxConfig
from clarinet_sandbox.exceptions import SandboxError
from clarinet_sandbox.models import Contract
from clarinet_sandbox.sandbox import ClarinetSandboxAsync
from clarinet_sandbox.session_manager import DEFAULT_SESSION_ID
from clarinet_sandbox.utils.logger import logger

config = SandboxConfig()

# Initialize Sandbox Logic
sandbox = ClarinetSandboxAsync(config)

# Initialize MCP Server
mcp = FastMCP("clarinet-sandbox")


@mcp.tool()  # type: ignore[misc]
async def check_contract(name: str, code: str) -> list[TextContent]:
    """
    Run `clarinet check` on a single contract.
    Returns the verdict followed by any diagnostics.
    """
    try:
        result = await sandbox.check(Contract(name=name, code=code))
    except (SandboxError, ValidationError, ValueError) as e:
        return [TextContent(type="text", text=f"Error checking contract: {e!s}")]

    output = [TextContent(type="text", text="Check passed" if result.success else "Check failed")]
    for error in result.errors:
        output.append(TextContent(type="text", text=error))
    if result.raw_output:
        output.append(TextContent(type="text", text=f"OUTPUT:\n{result.raw_output}"))
    return output


@mcp.tool()  # type: ignore[misc]
async def deploy_contract(name: str, code: str, session_id: str = DEFAULT_SESSION_ID) -> str:
    """
    Make a contract the active contract of the console session.
    """
    try:
        await sandbox.set_active(Contract(name=name, code=code), session_id)
    except (ValidationError, ValueError) as e:
        return f"Error deploying contract: {e!s}"
    return f"Contract {name} deployed."


@mcp.tool()  # type: ignore[misc]
async def evaluate_expression(expression: str, session_id: str = DEFAULT_SESSION_ID) -> str:
    """
    Evaluate a Clarity expression in the session's console.
    """
    try:
        result = await sandbox.evaluate(expression, session_id)
    except SandboxError as e:
        return f"Error evaluating expression: {e!s}"
    return result.message


@mcp.tool()  # type: ignore[misc]
async def inspect_state(session_id: str = DEFAULT_SESSION_ID) -> list[str]:
    """
    List asset balances of the session's console.
    """
    try:
        result = await sandbox.inspect_state(session_id)
    except SandboxError as e:
        return [f"Error inspecting state: {e!s}"]
    return [f"{entry.name}: {entry.value}" for entry in result.state]


@mcp.tool()  # type: ignore[misc]
async def run_terminal(command: str, session_id: str = DEFAULT_SESSION_ID) -> str:
    """
    Run a `clarinet ...` command line in a project holding the active contract.
    """
    try:
        result = await sandbox.terminal(command, session_id)
    except SandboxError as e:
        return f"Error running command: {e!s}"
    return result.message


def main() -> None:
    """Entry point for the MCP server."""
    mcp.run()


def serve() -> None:
    """Entry point for the HTTP API."""
    logger.info(f"Clarinet CLI backend running at http://{config.host}:{config.port}")
    uvicorn.run(create_app(config, sandbox=sandbox), host=config.host, port=config.port)


if __name__ == "__main__":  # pragma: no cover
    serve()
