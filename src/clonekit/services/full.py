"""FullCloneStrategy — bit-exact clone through a pickle round trip.

The binary service can execute arbitrary reconstruction code while
decoding, so this strategy only runs when the caller asserted that the
source is safe. Every object in the graph must also carry the
serializability marker (see :mod:`clonekit.domain.markers`); the pickler
rejects unmarked instances while encoding.
"""

from __future__ import annotations

import io
import logging
import pickle
from typing import Any

from clonekit.domain.errors import (
    DecodingError,
    EncodingError,
    NotSerializableError,
    UnauthorizedTrustError,
)
from clonekit.domain.markers import is_serializable
from clonekit.domain.types import StrategyKind
from clonekit.services.base import BaseStrategy
from clonekit.services.result import StrategyResult

logger = logging.getLogger(__name__)


class _MarkerEnforcingPickler(pickle.Pickler):
    """Pickler refusing any object whose type lacks the marker."""

    def reducer_override(self, obj: Any) -> Any:
        if is_serializable(obj):
            return NotImplemented
        raise NotSerializableError(
            f"{type(obj).__module__}.{type(obj).__qualname__} is not marked serializable"
        )


class FullCloneStrategy(BaseStrategy):
    """All-or-nothing binary round trip.

    Args:
        authorized: The caller's safe-source assertion. Without it every
            attempt fails with ``unauthorized_trust``.
        protocol: Pickle protocol used for the round trip.
        enforce_markers: Reject unmarked objects anywhere in the graph,
            not only at the root.
    """

    kind = StrategyKind.FULL

    def __init__(
        self,
        *,
        authorized: bool,
        protocol: int = pickle.HIGHEST_PROTOCOL,
        enforce_markers: bool = True,
    ) -> None:
        self._authorized = authorized
        self._protocol = protocol
        self._enforce_markers = enforce_markers

    def _attempt(self, value: Any) -> StrategyResult:
        if not self._authorized:
            raise UnauthorizedTrustError("binary round trip requires a safe-source assertion")
        if not is_serializable(value):
            raise NotSerializableError(
                f"{type(value).__module__}.{type(value).__qualname__} is not marked serializable"
            )

        payload = self._encode(value)
        clone = self._decode(payload)
        logger.debug("binary round trip cloned %s (%d bytes)", type(value).__qualname__, len(payload))
        return StrategyResult(
            strategy=self.kind,
            ok=True,
            value=clone,
            fully_succeeded=True,
        )

    def _encode(self, value: Any) -> bytes:
        buffer = io.BytesIO()
        pickler_cls = _MarkerEnforcingPickler if self._enforce_markers else pickle.Pickler
        try:
            pickler_cls(buffer, protocol=self._protocol).dump(value)
        except NotSerializableError:
            raise
        except Exception as exc:
            raise EncodingError(f"binary encoding failed: {exc}") from exc
        return buffer.getvalue()

    @staticmethod
    def _decode(payload: bytes) -> Any:
        try:
            return pickle.loads(payload)  # noqa: S301 - gated by the safe-source assertion
        except Exception as exc:
            raise DecodingError(f"binary decoding failed: {exc}") from exc
