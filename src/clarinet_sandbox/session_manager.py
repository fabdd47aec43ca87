# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

import asyncio
import time
from dataclasses import dataclass, field

from loguru import logger

from clarinet_sandbox.config import SandboxConfig
from clarinet_sandbox.history import ReplHistory
from clarinet_sandbox.models import Contract

DEFAULT_SESSION_ID = "default"


@dataclass
class Session:
    session_id: str
    last_accessed: float
    active_contract: Contract | None = None
    history: ReplHistory = field(default_factory=ReplHistory)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    active: bool = True


class SessionManager:
    """Manages the lifecycle of console sessions.

    A session owns the active contract and the replay history of one IDE user.
    Idle sessions are dropped by a background reaper task.
    """

    def __init__(self, config: SandboxConfig | None = None, reaper_enabled: bool = True):
        """Initializes the SessionManager.

        Args:
            config: Optional configuration object. If not provided, defaults are used.
            reaper_enabled: Run the idle reaper. Disabled when no event loop outlives a call.
        """
        self.config = config or SandboxConfig()
        self.reaper_enabled = reaper_enabled
        self.sessions: dict[str, Session] = {}
        self._reaper_task: asyncio.Task[None] | None = None
        self._creation_lock = asyncio.Lock()

    async def get_or_create_session(self, session_id: str) -> Session:
        """Retrieve existing session or create a new one.

        Updates the last_accessed timestamp for the session.

        Args:
            session_id: The unique identifier for the session.

        Returns:
            Session: The live session object.

        Raises:
            ValueError: If session_id is empty.
        """
        if not session_id:
            raise ValueError("Session ID is required")

        await self._start_reaper_if_needed()

        # Optimistic check
        session = self.sessions.get(session_id)
        if session is not None:
            session.last_accessed = time.time()
            return session

        async with self._creation_lock:
            # Double-check inside lock
            session = self.sessions.get(session_id)
            if session is not None:
                session.last_accessed = time.time()
                return session

            logger.info("Creating console session", session_id=session_id)
            session = Session(session_id=session_id, last_accessed=time.time())
            self.sessions[session_id] = session
            return session

    async def reset_session(self, session_id: str) -> None:
        """Forget the active contract and history of a session."""
        session = self.sessions.get(session_id)
        if session is None:
            return
        async with session.lock:
            session.active_contract = None
            session.history.clear()
            session.last_accessed = time.time()
        logger.info("Session reset", session_id=session_id)

    async def _start_reaper_if_needed(self) -> None:
        """Start the background reaper task if it is not already running."""
        if not self.reaper_enabled:
            return
        if self._reaper_task is None or self._reaper_task.done():
            self._reaper_task = asyncio.create_task(self._reaper_loop())

    async def _reaper_loop(self) -> None:
        """Background task that drops sessions idle longer than idle_timeout."""
        logger.info("Session reaper started")
        try:
            while True:
                await asyncio.sleep(self.config.reaper_interval)
                self._reap(time.time())
        except asyncio.CancelledError:
            logger.info("Session reaper cancelled")
        except Exception as e:
            logger.error(f"Session reaper crashed: {e}")

    def _reap(self, now: float) -> list[str]:
        # Snapshot ids to avoid modifying dict while iterating
        expired_ids = [
            sid
            for sid, session in self.sessions.items()
            if now - session.last_accessed > self.config.idle_timeout and not session.lock.locked()
        ]
        for sid in expired_ids:
            logger.info(f"Session {sid} expired. Dropping.")
            session = self.sessions.pop(sid, None)
            if session:
                session.active = False
        return expired_ids

    async def shutdown(self) -> None:
        """Stop the reaper and drop all sessions."""
        if self._reaper_task and not self._reaper_task.done():
            self._reaper_task.cancel()
            try:
                await self._reaper_task
            except asyncio.CancelledError:
                pass
            self._reaper_task = None

        logger.info(f"Shutting down SessionManager. Dropping {len(self.sessions)} sessions.")
        for session in self.sessions.values():
            session.active = False
        self.sessions.clear()
