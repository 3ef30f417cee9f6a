"""CloneRequest — the immutable input of a single clone call."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

DEFAULT_DEPTH = 2


class CloneRequest(BaseModel):
    """Validated clone arguments.

    ``depth`` is coerced to a positive integer: ``"3"`` and ``3.0`` are
    accepted, ``None`` falls back to :data:`DEFAULT_DEPTH`, and zero,
    negative or fractional values fail validation.
    """

    model_config = {"frozen": True}

    source: Any = None
    depth: int = Field(default=DEFAULT_DEPTH, gt=0)
    source_is_safe: bool = False

    @field_validator("depth", mode="before")
    @classmethod
    def _default_missing_depth(cls, value: Any) -> Any:
        if value is None:
            return DEFAULT_DEPTH
        return value
