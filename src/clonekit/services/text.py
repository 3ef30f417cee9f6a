"""TextCloneStrategy — clone through a tagged YAML round trip.

Uses ruamel.yaml's safe loader, which never resolves arbitrary Python
names from the document. Class instances are admitted only when their type
was registered with the strategy, came from a plugin, or carries the
serializability marker; the tag-to-class table used while loading is built
from the source graph during dumping, never from the text itself.
Anchors and aliases preserve sharing and cycles at full depth.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from io import StringIO
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.constructor import SafeConstructor
from ruamel.yaml.error import YAMLError
from ruamel.yaml.representer import RepresenterError, SafeRepresenter

from clonekit.domain.errors import DecodingError, EncodingError
from clonekit.domain.fields import discover_fields, slot_names
from clonekit.domain.markers import MARKER_ATTR
from clonekit.domain.types import StrategyKind
from clonekit.services.base import BaseStrategy
from clonekit.services.result import StrategyResult

logger = logging.getLogger(__name__)

TUPLE_TAG = "!tuple"
FROZENSET_TAG = "!frozenset"
MAX_DOCUMENT_BYTES = 50 * 1024 * 1024


def _represent_tuple(representer: SafeRepresenter, data: tuple[Any, ...]) -> Any:
    return representer.represent_sequence(TUPLE_TAG, list(data))


def _represent_frozenset(representer: SafeRepresenter, data: frozenset[Any]) -> Any:
    return representer.represent_sequence(FROZENSET_TAG, list(data))


def _construct_tuple(constructor: SafeConstructor, node: Any) -> tuple[Any, ...]:
    return tuple(constructor.construct_sequence(node, deep=True))


def _construct_frozenset(constructor: SafeConstructor, node: Any) -> frozenset[Any]:
    return frozenset(constructor.construct_sequence(node, deep=True))


def _object_constructor(cls: type) -> Any:
    slots = frozenset(slot_names(cls))

    def construct(constructor: SafeConstructor, node: Any) -> Iterator[Any]:
        instance = cls.__new__(cls)
        yield instance
        state = constructor.construct_mapping(node)
        for name, value in state.items():
            if name in slots:
                object.__setattr__(instance, name, value)
            else:
                instance.__dict__[name] = value

    return construct


class _TextCodec:
    """Per-call YAML instance plus the tag table discovered while dumping.

    A fresh ruamel ``YAML`` object and fresh representer/constructor
    subclasses per call keep registrations from leaking across calls.
    """

    def __init__(self, allowed: frozenset[type]) -> None:
        self._allowed = allowed
        self._tags: dict[type, str] = {}

        representer_cls = type("_CloneRepresenter", (SafeRepresenter,), {})
        constructor_cls = type("_CloneConstructor", (SafeConstructor,), {})
        representer_cls.add_representer(tuple, _represent_tuple)
        representer_cls.add_representer(frozenset, _represent_frozenset)
        representer_cls.add_multi_representer(object, self._represent_object)
        constructor_cls.add_constructor(TUPLE_TAG, _construct_tuple)
        constructor_cls.add_constructor(FROZENSET_TAG, _construct_frozenset)
        self._constructor_cls = constructor_cls

        yaml = YAML(typ="safe", pure=True)
        yaml.Representer = representer_cls
        yaml.Constructor = constructor_cls
        yaml.default_flow_style = False
        yaml.width = 4096
        yaml.representer.sort_base_mapping_type_on_output = False
        self._yaml = yaml

    def admits(self, cls: type) -> bool:
        return cls in self._allowed or getattr(cls, MARKER_ATTR, False) is True

    def _represent_object(self, representer: SafeRepresenter, data: Any) -> Any:
        cls = type(data)
        if not self.admits(cls):
            raise RepresenterError(f"cannot represent an object: {cls.__qualname__}")
        tag = self._tags.get(cls)
        if tag is None:
            tag = f"!{cls.__name__}.{len(self._tags)}"
            self._tags[cls] = tag
            self._constructor_cls.add_constructor(tag, _object_constructor(cls))
        state = {accessor.name: accessor.get(data) for accessor in discover_fields(data)}
        return representer.represent_mapping(tag, state)

    def dump(self, value: Any) -> str:
        stream = StringIO()
        self._yaml.dump(value, stream)
        return stream.getvalue()

    def load(self, document: str) -> Any:
        return self._yaml.load(document)


class TextCloneStrategy(BaseStrategy):
    """Full-depth clone via a trusted text round trip.

    Does not require a safe-source assertion. Fails with ``ok=False`` when
    the graph contains a type the encoder cannot represent.

    Args:
        types: Classes (besides marked ones) whose instances may be encoded.
        max_document_bytes: Upper bound for the intermediate document.
    """

    kind = StrategyKind.TEXT

    def __init__(
        self,
        *,
        types: Iterable[type] = (),
        max_document_bytes: int = MAX_DOCUMENT_BYTES,
    ) -> None:
        self._types = frozenset(types)
        self._max_document_bytes = max_document_bytes

    def _attempt(self, value: Any) -> StrategyResult:
        codec = _TextCodec(self._types)
        try:
            document = codec.dump(value)
        except (YAMLError, RecursionError, TypeError, AttributeError) as exc:
            raise EncodingError(f"text encoding failed: {exc}") from exc

        size = len(document.encode("utf-8"))
        if size > self._max_document_bytes:
            raise EncodingError(
                f"text document too large ({size} bytes, max {self._max_document_bytes})"
            )

        try:
            clone = codec.load(document)
        except (YAMLError, RecursionError, TypeError, AttributeError, ValueError) as exc:
            raise DecodingError(f"text decoding failed: {exc}") from exc

        logger.debug("text round trip cloned %s (%d bytes)", type(value).__qualname__, size)
        return StrategyResult(
            strategy=self.kind,
            ok=True,
            value=clone,
            fully_succeeded=True,
        )
