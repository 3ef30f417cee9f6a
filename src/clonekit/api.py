"""Public entry points: ``clone`` and ``clone_value``.

The module keeps one lazily built :class:`CloneService` configured from
``clonekit.toml`` and ``CLONEKIT_*`` environment variables. A broken
configuration is logged and replaced by code defaults, so neither entry
point ever raises.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from clonekit.config.settings import CloneSettings
from clonekit.domain.slot import Slot
from clonekit.domain.types import FailureKind, StatusCode
from clonekit.plugins.manager import PluginManager
from clonekit.services.orchestrator import CloneService
from clonekit.services.result import CloneFailure, CloneOutcome

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_default_service: CloneService | None = None


def _load_settings() -> CloneSettings:
    try:
        return CloneSettings.from_cli()
    except (click.ClickException, ValidationError) as exc:
        logger.warning("ignoring invalid clonekit configuration: %s", exc)
        return CloneSettings.model_construct()


def build_service(settings: CloneSettings, *, text_types: Any = ()) -> CloneService:
    """CloneService wired with the plugins named by *settings*."""
    plugins = PluginManager()
    local_dir = settings.plugins.local_dir
    plugins.discover_and_load(
        entry_points=settings.plugins.entry_points,
        local_dir=Path(local_dir) if local_dir else None,
    )
    return CloneService(settings, plugins=plugins, text_types=text_types)


def get_service() -> CloneService:
    """The process-wide default service, built on first use."""
    global _default_service
    with _lock:
        if _default_service is None:
            _default_service = build_service(_load_settings())
        return _default_service


def configure(service: CloneService | None = None, **overrides: Any) -> CloneService:
    """Replace the default service.

    Pass a ready :class:`CloneService`, or keyword overrides which are
    merged over the discovered settings (e.g. ``engine={"reflection": False}``).
    Calling with no arguments rebuilds from the environment.
    """
    global _default_service
    if service is None:
        settings = CloneSettings.from_cli(**overrides) if overrides else _load_settings()
        service = build_service(settings)
    with _lock:
        _default_service = service
    return service


def reset() -> None:
    """Forget the default service; the next call rebuilds it."""
    global _default_service
    with _lock:
        _default_service = None


def clone_value(
    source: Any,
    depth: Any = None,
    source_is_safe: bool = False,
) -> CloneOutcome:
    """Clone *source* and return the full :class:`CloneOutcome`."""
    try:
        return get_service().clone(source, depth, source_is_safe)
    except Exception as exc:
        logger.exception("unexpected error while cloning %s", type(source).__qualname__)
        failure = CloneFailure(code=FailureKind.INTERNAL_ERROR, message=str(exc))
        return CloneOutcome(status=StatusCode.FAILED, failures=[failure])


def clone(
    destination: Slot,
    source: Any,
    depth: Any = None,
    source_is_safe: bool = False,
) -> int:
    """Clone *source* into *destination* and return the status code.

    Args:
        destination: Receives the clone, or ``None`` when no clone could
            be produced. Always written, whatever the outcome.
        source: The value to copy. Never mutated.
        depth: Structural depth for the recursive strategy; ``None`` means
            the configured default (2). Non-positive values fail.
        source_is_safe: Assert that *source* may go through the binary
            round trip.

    Returns:
        0 for a full binary clone, 1 for a recursive or text clone, 2 when
        every strategy failed.
    """
    outcome = clone_value(source, depth, source_is_safe)
    destination.value = outcome.value
    return int(outcome.status)
