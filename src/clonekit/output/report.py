"""CommandReport — the CLI-level result every command emits."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class CommandError(BaseModel):
    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class CommandReport(BaseModel):
    """What a command hands to ``AppContext.emit``.

    Attributes:
        ok: Whether the command succeeded; failures exit with code 1.
        op: Operation name, used to pick a renderer.
        data: JSON-safe payload.
        warnings: Degradations worth surfacing without failing.
        error: Set when ``ok`` is False.
        meta: Telemetry and other verbose-only information.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: CommandError | None = None
    meta: dict[str, Any] | None = None
