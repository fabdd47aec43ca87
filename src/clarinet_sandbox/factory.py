# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

from clarinet_sandbox.config import SandboxConfig
from clarinet_sandbox.runtime import ToolRuntime
from clarinet_sandbox.runtimes.clarinet import ClarinetRuntime, resolve_binary


class SandboxFactory:
    """
    Factory to create ToolRuntime instances based on configuration.
    """

    @staticmethod
    def get_runtime(config: SandboxConfig) -> ToolRuntime:
        """
        Returns a runtime bound to the resolved tool binary.
        """
        return ClarinetRuntime(
            binary=resolve_binary(config.tool_name, config.bin_dir),
            timeout=config.execution_timeout,
        )
