"""StrategyResult and CloneOutcome — the internal and public result contracts.

INVARIANT: Strategies return StrategyResult and never raise.
The orchestrator folds strategy results into exactly one CloneOutcome,
and ``clone()`` reduces that to an integer status code.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from clonekit.domain.errors import CloneError
from clonekit.domain.types import FailureKind, StatusCode, StrategyKind


class CloneFailure(BaseModel):
    """One absorbed failure: what went wrong and where in the graph."""

    model_config = {"frozen": True}

    code: FailureKind
    message: str
    path: str = "$"
    strategy: StrategyKind | None = None

    @classmethod
    def from_error(cls, error: CloneError, *, strategy: StrategyKind | None = None) -> CloneFailure:
        return cls(code=error.code, message=error.message, path=error.path, strategy=strategy)


class StrategyResult(BaseModel):
    """Return type shared by all three strategies.

    Attributes:
        strategy: Which technique produced this result.
        ok: Whether a clone was produced.
        value: The clone (``None`` when ``ok`` is False).
        fully_succeeded: Every node was cloned without degradation.
        depth_limited: At least one node was shared at the depth horizon.
        failures: Absorbed per-node or whole-strategy failures.
    """

    model_config = {"frozen": True}

    strategy: StrategyKind
    ok: bool
    value: Any = None
    fully_succeeded: bool = False
    depth_limited: bool = False
    failures: list[CloneFailure] = Field(default_factory=list)

    @classmethod
    def failed(cls, strategy: StrategyKind, error: CloneError) -> StrategyResult:
        return cls(
            strategy=strategy,
            ok=False,
            failures=[CloneFailure.from_error(error, strategy=strategy)],
        )


class CloneOutcome(BaseModel):
    """Everything that outlives a clone call.

    ``status`` is the public contract; the remaining attributes are
    diagnostics for callers that want more than an integer.
    """

    model_config = {"frozen": True}

    value: Any = None
    status: StatusCode
    strategy: StrategyKind | None = None
    fully_succeeded: bool = False
    depth_limited: bool = False
    attempted: list[StrategyKind] = Field(default_factory=list)
    failures: list[CloneFailure] = Field(default_factory=list)
    meta: dict[str, Any] | None = None

    @property
    def ok(self) -> bool:
        return self.status != StatusCode.FAILED

    def summary(self) -> dict[str, Any]:
        """JSON-safe view without the cloned value."""
        return {
            "status": int(self.status),
            "status_name": self.status.name,
            "strategy": self.strategy.value if self.strategy else None,
            "fully_succeeded": self.fully_succeeded,
            "depth_limited": self.depth_limited,
            "attempted": [kind.value for kind in self.attempted],
            "failures": [failure.model_dump(mode="json") for failure in self.failures],
        }
