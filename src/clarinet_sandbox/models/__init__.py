# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

"""
Data models for the Clarinet sandbox.
"""

from .contract import Contract
from .result import InterpretedResult, InvocationResult, StateEntry

__all__ = ["Contract", "InterpretedResult", "InvocationResult", "StateEntry"]
