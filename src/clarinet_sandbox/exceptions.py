# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

from typing import Any


class SandboxError(RuntimeError):
    """Base class for faults raised by the sandbox service."""


class WorkspaceCreationFailed(SandboxError):
    """The temporary Clarinet project could not be written to disk."""


class InvocationFault(SandboxError):
    """The tool process could not be launched or did not finish in time.

    A tool that runs and exits non-zero is not a fault; see InvocationResult.
    """


class GitHubError(SandboxError):
    def __init__(self, message: str, *, status_code: int | None = None, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class CompilerProxyError(SandboxError):
    """The remote compiler service could not be reached."""


class GitCommandError(SandboxError):
    def __init__(self, message: str, *, returncode: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr
