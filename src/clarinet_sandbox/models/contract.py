# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

from pydantic import BaseModel, ConfigDict, Field, field_validator

CONTRACT_EXTENSION = ".clar"


class Contract(BaseModel):
    """A Clarity contract supplied by the IDE.

    Attributes:
        name: The contract name as shown in the editor, optionally ending in ``.clar``.
        code: The Clarity source.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    code: str

    @field_validator("name")
    @classmethod
    def _no_path_components(cls, value: str) -> str:
        # The name becomes a file name inside the workspace.
        if "/" in value or "\\" in value or value.strip(".") == "" or value == CONTRACT_EXTENSION:
            raise ValueError(f"Invalid contract name: {value!r}")
        return value

    @property
    def project_name(self) -> str:
        """The name with a trailing ``.clar`` removed, used inside the project."""
        if self.name.endswith(CONTRACT_EXTENSION):
            return self.name[: -len(CONTRACT_EXTENSION)]
        return self.name
