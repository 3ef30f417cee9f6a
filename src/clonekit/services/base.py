"""BaseStrategy — shared foundation for the three cloning techniques.

Every strategy exposes ``attempt(value) -> StrategyResult``. Subclasses
implement ``_attempt`` and raise :class:`~clonekit.domain.errors.CloneError`
subclasses at the point of failure; ``attempt`` converts them into a
failed result so orchestration never sees an exception.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Protocol

from clonekit.domain.errors import CloneError
from clonekit.domain.types import StrategyKind
from clonekit.services.result import StrategyResult

logger = logging.getLogger(__name__)


class CloneStrategy(Protocol):
    """Capability shared by every strategy variant."""

    kind: ClassVar[StrategyKind]

    def attempt(self, value: Any) -> StrategyResult: ...


class BaseStrategy:
    """Abstract base for strategy classes.

    Usage::

        class FullCloneStrategy(BaseStrategy):
            kind = StrategyKind.FULL

            def _attempt(self, value: Any) -> StrategyResult:
                ...
    """

    kind: ClassVar[StrategyKind]

    def attempt(self, value: Any) -> StrategyResult:
        """Run the strategy; failures come back as ``ok=False`` results.

        INVARIANT: never raises for a CloneError.
        """
        try:
            return self._attempt(value)
        except CloneError as exc:
            logger.debug("%s strategy declined at %s: %s", self.kind.value, exc.path, exc.message)
            return StrategyResult.failed(self.kind, exc)

    def _attempt(self, value: Any) -> StrategyResult:
        raise NotImplementedError
