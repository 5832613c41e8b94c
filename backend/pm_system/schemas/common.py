from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from sqlmodel import SQLModel

from pm_system.core.time import as_naive_utc

# Integer keys are 64-bit signed in every supported store.
ID_MIN = -(2**63)
ID_MAX = 2**63 - 1


class APIModel(SQLModel):
    """Base for request/response bodies: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("*", mode="after")
    @classmethod
    def _store_naive_utc(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return as_naive_utc(value)
        return value


class MessageResponse(APIModel):
    message: str
