"""Pydantic models for the Bot API response envelope and the method table.

The result payload is never modelled: whatever the platform returns under
``result`` is handed back to the caller as plain JSON data.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

from pydantic import BaseModel, field_validator, model_validator


class ResponseParameters(BaseModel):
    """Contains information about why a request was unsuccessful."""

    migrate_to_chat_id: Optional[int] = None
    retry_after: Optional[int] = None

    model_config = {"populate_by_name": True}


class ResponseEnvelope(BaseModel):
    """The uniform JSON wrapper every Bot API response is delivered in.

    The flood-control and migration hints are accepted both at the top level
    and inside the nested ``parameters`` object, which is where the Bot API
    places them.
    """

    ok: bool
    result: Any = None
    description: Optional[str] = None
    error_code: Optional[int] = None
    retry_after: Optional[int] = None
    migrate_to_chat_id: Optional[int] = None
    parameters: Optional[ResponseParameters] = None

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _result_present_when_ok(self) -> "ResponseEnvelope":
        if self.ok and "result" not in self.model_fields_set:
            raise ValueError("envelope has ok=true but no result")
        return self

    @property
    def retry_hint(self) -> Optional[int]:
        """``retry_after`` from the top level or from ``parameters``."""
        if self.retry_after is not None:
            return self.retry_after
        if self.parameters is not None:
            return self.parameters.retry_after
        return None

    @property
    def migration_hint(self) -> Optional[int]:
        """``migrate_to_chat_id`` from the top level or from ``parameters``."""
        if self.migrate_to_chat_id is not None:
            return self.migrate_to_chat_id
        if self.parameters is not None:
            return self.parameters.migrate_to_chat_id
        return None


class ApiConfig(BaseModel):
    """Bot API version string plus the ordered list of method names to bind."""

    version: str
    methods: Tuple[str, ...]

    model_config = {"frozen": True}

    @field_validator("methods")
    @classmethod
    def _no_blank_names(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        for name in value:
            if not name or not name.strip():
                raise ValueError("method names must be non-empty strings")
        return value
