"""Shared schema primitives for MCP tool request/response models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


def validate_optional_non_empty_str(value: Optional[str], field_name: str) -> Optional[str]:
    """Validate optional string fields that cannot be empty/whitespace."""
    if value is None:
        return None
    if not value.strip():
        raise ValueError(f"Invalid {field_name}: cannot be empty")
    return value


def validate_non_empty_str(value: str, field_name: str) -> str:
    """Validate required string fields that cannot be empty/whitespace."""
    if not value.strip():
        raise ValueError(f"Invalid {field_name}: cannot be empty")
    return value.strip()


class StrictIgnoreRequest(BaseModel):
    """Request base with strict typing and ignored unknown fields."""

    model_config = ConfigDict(extra="ignore", strict=True)


class StrictResponse(BaseModel):
    """Response/result base with strict typing and forbidden unknown fields."""

    model_config = ConfigDict(extra="forbid")


class ActorIdMixin(BaseModel):
    """Reusable actor_id field validation."""

    actor_id: Optional[str] = None

    @field_validator("actor_id")
    @classmethod
    def validate_actor_id(cls, value: Optional[str]) -> Optional[str]:
        return validate_optional_non_empty_str(value, "actor_id")
