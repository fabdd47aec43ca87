# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
from loguru import logger

from clarinet_sandbox.config import SandboxConfig
from clarinet_sandbox.factory import SandboxFactory
from clarinet_sandbox.history import build_replay_script
from clarinet_sandbox.interpreter import OutputInterpreter
from clarinet_sandbox.models import Contract, InterpretedResult
from clarinet_sandbox.policy import CommandRejected, parse_tool_command
from clarinet_sandbox.runtime import ToolRuntime
from clarinet_sandbox.session_manager import DEFAULT_SESSION_ID, Session, SessionManager
from clarinet_sandbox.workspace import WorkspaceFactory

CHECK_COMMAND = ("check",)
CONSOLE_COMMAND = ("console",)


class ClarinetSandboxAsync:
    """Async-native orchestration of Clarinet runs (The Core).

    Every operation builds a fresh workspace, runs the tool in it, interprets
    the output and removes the workspace, whatever the outcome. Console state
    is rebuilt on each run by replaying the session's history.
    """

    def __init__(
        self,
        config: SandboxConfig | None = None,
        runtime: ToolRuntime | None = None,
        sessions: SessionManager | None = None,
        workspaces: WorkspaceFactory | None = None,
        interpreter: OutputInterpreter | None = None,
    ):
        """Initializes the ClarinetSandboxAsync service.

        Args:
            config: Configuration for the sandbox.
            runtime: Tool runtime. Defaults to the factory's Clarinet runtime.
            sessions: Session registry holding active contracts and histories.
            workspaces: Builder for temporary projects.
            interpreter: Decoder for the tool's text output.
        """
        self.config = config or SandboxConfig()
        self.runtime: ToolRuntime = runtime or SandboxFactory.get_runtime(self.config)
        self.sessions = sessions or SessionManager(self.config)
        self.workspaces = workspaces or WorkspaceFactory(self.config.workspace_root)
        self.interpreter = interpreter or OutputInterpreter()

    @asynccontextmanager
    async def _locked_session(self, session_id: str) -> AsyncIterator[Session]:
        while True:
            session = await self.sessions.get_or_create_session(session_id)
            async with session.lock:
                if not session.active:
                    # Reaped while we waited for the lock
                    logger.warning(f"Session {session_id} inactive/reaped. Retrying creation.")
                    continue
                yield session
                return

    async def check(self, contract: Contract) -> InterpretedResult:
        """Statically check a single contract.

        Args:
            contract: The contract to check. Session state is not touched.

        Returns:
            InterpretedResult: Success iff the checker exited zero, with diagnostics.

        Raises:
            WorkspaceCreationFailed: If the project cannot be written.
            InvocationFault: If the checker cannot be launched.
        """
        logger.info(f"Running check for {contract.name}")
        async with self.workspaces.workspace([contract]) as root:
            invocation = await self.runtime.run(CHECK_COMMAND, root)
        return self.interpreter.check(invocation)

    async def set_active(self, contract: Contract, session_id: str = DEFAULT_SESSION_ID) -> None:
        """Replace the session's active contract."""
        async with self._locked_session(session_id) as session:
            session.active_contract = contract
        logger.info("Updated active contract context", session_id=session_id, contract=contract.name)

    async def evaluate(self, expression: str, session_id: str = DEFAULT_SESSION_ID) -> InterpretedResult:
        """Evaluate an expression on top of the session's accepted history.

        The expression joins the history only when its result is not an error.

        Raises:
            WorkspaceCreationFailed: If the project cannot be written.
            InvocationFault: If the console cannot be launched.
        """
        async with self._locked_session(session_id) as session:
            script = build_replay_script(session.history.snapshot(), expression)
            logger.info("Executing snippet", session_id=session_id, snippet=expression)

            async with self.workspaces.workspace(_seed(session)) as root:
                invocation = await self.runtime.run(CONSOLE_COMMAND, root, stdin=script)

            result = self.interpreter.evaluate(invocation, expression)
            if result.success:
                session.history.append(expression)
            return result

    async def inspect_state(self, session_id: str = DEFAULT_SESSION_ID) -> InterpretedResult:
        """Dump asset balances for a console seeded with the active contract."""
        async with self._locked_session(session_id) as session:
            contracts = _seed(session)

        async with self.workspaces.workspace(contracts) as root:
            invocation = await self.runtime.run(CONSOLE_COMMAND, root, stdin=build_replay_script([]))
        return self.interpreter.state(invocation)

    async def terminal(self, command: str, session_id: str = DEFAULT_SESSION_ID) -> InterpretedResult:
        """Run a raw tool command line inside a project seeded with the active contract.

        Commands that do not invoke the tool are rejected without running anything.
        """
        logger.info("Terminal command", session_id=session_id, command=command)
        try:
            args = parse_tool_command(command, self.config.tool_name)
        except CommandRejected as e:
            logger.warning(f"Rejected terminal command: {command}")
            return InterpretedResult(success=False, message=str(e))

        async with self._locked_session(session_id) as session:
            contracts = _seed(session)

        async with self.workspaces.workspace(contracts) as root:
            invocation = await self.runtime.run(args, root)
        return self.interpreter.terminal(invocation, command.strip())

    async def reset(self, session_id: str = DEFAULT_SESSION_ID) -> None:
        """Drop the session's history and active contract."""
        await self.sessions.reset_session(session_id)

    async def shutdown(self) -> None:
        await self.sessions.shutdown()


def _seed(session: Session) -> list[Contract]:
    return [session.active_contract] if session.active_contract else []


class ClarinetSandbox:
    """Sync Facade for ClarinetSandboxAsync (The Facade).

    Wraps ClarinetSandboxAsync and executes methods via anyio.run.
    """

    def __init__(self, config: SandboxConfig | None = None, runtime: ToolRuntime | None = None):
        """Initializes the ClarinetSandbox facade.

        Args:
            config: Configuration for the sandbox.
            runtime: Optional tool runtime.
        """
        config = config or SandboxConfig()
        # Each call runs its own event loop, so no background reaper.
        self._async = ClarinetSandboxAsync(
            config,
            runtime=runtime,
            sessions=SessionManager(config, reaper_enabled=False),
        )

    def check(self, contract: Contract) -> InterpretedResult:
        return anyio.run(self._async.check, contract)

    def set_active(self, contract: Contract, session_id: str = DEFAULT_SESSION_ID) -> None:
        anyio.run(self._async.set_active, contract, session_id)

    def evaluate(self, expression: str, session_id: str = DEFAULT_SESSION_ID) -> InterpretedResult:
        return anyio.run(self._async.evaluate, expression, session_id)

    def inspect_state(self, session_id: str = DEFAULT_SESSION_ID) -> InterpretedResult:
        return anyio.run(self._async.inspect_state, session_id)

    def terminal(self, command: str, session_id: str = DEFAULT_SESSION_ID) -> InterpretedResult:
        return anyio.run(self._async.terminal, command, session_id)

    def reset(self, session_id: str = DEFAULT_SESSION_ID) -> None:
        anyio.run(self._async.reset, session_id)
