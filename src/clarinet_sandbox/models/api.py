# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

"""Request and response bodies of the HTTP API."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .result import StateEntry


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ContractRequest(_ApiModel):
    code: str
    name: str = Field(..., min_length=1)


class ExecuteRequest(_ApiModel):
    snippet: str


class StateRequest(_ApiModel):
    contract_name: str | None = None


class TerminalRequest(_ApiModel):
    command: str


class CheckResponse(_ApiModel):
    success: bool
    output: str = ""
    errors: list[str] = Field(default_factory=list)


class SuccessResponse(_ApiModel):
    success: bool


class ExecuteResponse(_ApiModel):
    success: bool
    result: str
    events: list[dict[str, str]] = Field(default_factory=list)


class StateResponse(_ApiModel):
    success: bool
    state: list[StateEntry]
    block_height: int
    deployer: str


class TerminalResponse(_ApiModel):
    success: bool
    output: str


class HealthResponse(_ApiModel):
    status: str
    engine: str


class CloneRequest(_ApiModel):
    owner: str = Field(..., min_length=1)
    repo: str = Field(..., min_length=1)
    branch: str = "main"


class GistRequest(_ApiModel):
    description: str | None = None
    files: dict[str, str] = Field(default_factory=dict)
    is_public: bool = True


class FilePathRequest(_ApiModel):
    file_path: str = Field(..., min_length=1)


class CommitRequest(_ApiModel):
    message: str = Field(..., min_length=1)


class CheckoutRequest(_ApiModel):
    branch: str = Field(..., min_length=1)
    create: bool = False
