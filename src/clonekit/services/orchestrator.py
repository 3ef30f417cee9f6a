"""CloneService — strategy selection for a single clone call.

Pipeline: TRY_FULL → TRY_RECURSIVE_OR_TEXT → DONE

The binary round trip runs at most once and only for a source the caller
asserted to be safe. The recursive cloner and the text round trip are
substitutes for the same tier: text runs only when reflection is
unavailable or the traversal cannot complete, never after a recursive run
that produced a clone.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from clonekit.config.settings import CloneSettings
from clonekit.domain.errors import CapabilityMissingError, InvalidRequestError
from clonekit.domain.fields import reflection_available
from clonekit.domain.models import CloneRequest
from clonekit.domain.types import StatusCode, StrategyKind
from clonekit.plugins.manager import PluginManager
from clonekit.services.base import CloneStrategy
from clonekit.services.full import FullCloneStrategy
from clonekit.services.recursive import RecursiveCloner, RecursiveStrategy
from clonekit.services.result import CloneFailure, CloneOutcome, StrategyResult
from clonekit.services.telemetry import trace_span, traced
from clonekit.services.text import TextCloneStrategy

logger = logging.getLogger(__name__)


class CloneService:
    """Runs clone requests against a fixed configuration.

    Args:
        settings: Engine configuration; defaults to code-baked defaults.
        plugins: Plugin manager consulted for field accessors and text
            types. Without one, reflective discovery alone is used.
        text_types: Extra classes the text round trip may encode.
    """

    def __init__(
        self,
        settings: CloneSettings | None = None,
        *,
        plugins: PluginManager | None = None,
        text_types: Iterable[type] = (),
    ) -> None:
        self._settings = settings or CloneSettings()
        self._plugins = plugins
        self._text_types = tuple(text_types)
        self._reflection: bool | None = None

    @property
    def settings(self) -> CloneSettings:
        return self._settings

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def clone(
        self,
        source: Any,
        depth: Any = None,
        source_is_safe: bool = False,
    ) -> CloneOutcome:
        """Validate the arguments and run the request.

        An invalid depth yields a FAILED outcome instead of an exception.
        """
        if depth is None:
            depth = self._settings.engine.default_depth
        try:
            request = CloneRequest(source=source, depth=depth, source_is_safe=source_is_safe)
        except ValidationError as exc:
            error = InvalidRequestError(f"invalid depth {depth!r}: {exc.errors()[0]['msg']}")
            logger.warning("clone rejected: %s", error.message)
            return CloneOutcome(
                status=StatusCode.FAILED,
                failures=[CloneFailure.from_error(error)],
            )
        return self.run(request)

    @traced
    def run(self, request: CloneRequest) -> CloneOutcome:
        """Select and run strategies for *request*; exactly one outcome."""
        attempted: list[StrategyKind] = []
        failures: list[CloneFailure] = []

        if request.source_is_safe:
            result = self._attempt(self._full_strategy(), request.source, attempted)
            if result.ok:
                return self._finish(result, StatusCode.FULL, attempted, failures)
            failures.extend(result.failures)

        if self._reflection_enabled():
            result = self._attempt(
                RecursiveStrategy(request.depth, cloner=self._cloner()),
                request.source,
                attempted,
            )
            if result.ok:
                return self._finish(result, StatusCode.PARTIAL, attempted, failures)
            failures.extend(result.failures)
        else:
            failures.append(
                CloneFailure.from_error(
                    CapabilityMissingError("reflective traversal is unavailable"),
                    strategy=StrategyKind.RECURSIVE,
                )
            )

        if self._settings.engine.text_substitute:
            result = self._attempt(self._text_strategy(), request.source, attempted)
            if result.ok:
                return self._finish(result, StatusCode.PARTIAL, attempted, failures)
            failures.extend(result.failures)

        logger.warning(
            "clone failed for %s after %s",
            type(request.source).__qualname__,
            ", ".join(kind.value for kind in attempted) or "no strategy",
        )
        return CloneOutcome(
            value=None,
            status=StatusCode.FAILED,
            attempted=attempted,
            failures=failures,
        )

    # ------------------------------------------------------------------
    # Strategy construction
    # ------------------------------------------------------------------

    def _full_strategy(self) -> FullCloneStrategy:
        full = self._settings.full
        return FullCloneStrategy(
            authorized=True,
            protocol=full.pickle_protocol,
            enforce_markers=full.enforce_markers,
        )

    def _text_strategy(self) -> TextCloneStrategy:
        types = list(self._text_types)
        if self._plugins is not None:
            types.extend(self._plugins.text_types())
        return TextCloneStrategy(
            types=types,
            max_document_bytes=self._settings.text.max_document_bytes,
        )

    def _cloner(self) -> RecursiveCloner:
        if self._plugins is None:
            return RecursiveCloner()
        return RecursiveCloner(field_provider=self._plugins.field_accessors)

    def _reflection_enabled(self) -> bool:
        if not self._settings.engine.reflection:
            return False
        if self._reflection is None:
            self._reflection = reflection_available()
            if not self._reflection:
                logger.info("reflection probe failed; using the text round trip")
        return self._reflection

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _attempt(
        strategy: CloneStrategy,
        source: Any,
        attempted: list[StrategyKind],
    ) -> StrategyResult:
        attempted.append(strategy.kind)
        with trace_span(strategy.kind.value) as span:
            result = strategy.attempt(source)
            if span:
                span.annotate("ok", result.ok)
                span.annotate("failures", len(result.failures))
                if result.depth_limited:
                    span.annotate("depth_limited", True)
        return result

    @staticmethod
    def _finish(
        result: StrategyResult,
        status: StatusCode,
        attempted: list[StrategyKind],
        failures: list[CloneFailure],
    ) -> CloneOutcome:
        logger.debug(
            "clone produced by %s strategy (status=%s, fully_succeeded=%s)",
            result.strategy.value,
            status.name,
            result.fully_succeeded,
        )
        return CloneOutcome(
            value=result.value,
            status=status,
            strategy=result.strategy,
            fully_succeeded=result.fully_succeeded,
            depth_limited=result.depth_limited,
            attempted=attempted,
            failures=[*failures, *result.failures],
        )
