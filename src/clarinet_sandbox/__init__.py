# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

"""
clarinet-sandbox
"""

__version__ = "0.1.0"

from .config import SandboxConfig
from .exceptions import InvocationFault, SandboxError, WorkspaceCreationFailed
from .factory import SandboxFactory
from .interpreter import OutputInterpreter
from .models import Contract, InterpretedResult, InvocationResult, StateEntry
from .runtime import ToolRuntime
from .runtimes.clarinet import ClarinetRuntime
from .sandbox import ClarinetSandbox, ClarinetSandboxAsync
from .workspace import WorkspaceFactory

__all__ = [
    "ClarinetRuntime",
    "ClarinetSandbox",
    "ClarinetSandboxAsync",
    "Contract",
    "InterpretedResult",
    "InvocationFault",
    "InvocationResult",
    "OutputInterpreter",
    "SandboxConfig",
    "SandboxError",
    "SandboxFactory",
    "StateEntry",
    "ToolRuntime",
    "WorkspaceCreationFailed",
    "WorkspaceFactory",
]
