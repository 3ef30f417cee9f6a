"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, clonekit.toml only contains
overrides. An absent file behaves exactly like an empty one.
"""

from __future__ import annotations

import pickle

from pydantic import BaseModel, Field

from clonekit.domain.models import DEFAULT_DEPTH
from clonekit.services.text import MAX_DOCUMENT_BYTES


class EngineConfig(BaseModel):
    """[engine] section.

    Attributes:
        default_depth: Depth used when a call passes none.
        reflection: Allow reflective traversal. When False the text
            round trip takes the place of the recursive cloner.
        text_substitute: Fall back to the text round trip when reflection
            is unavailable or the traversal aborts.
    """

    model_config = {"frozen": True}

    default_depth: int = Field(default=DEFAULT_DEPTH, gt=0)
    reflection: bool = True
    text_substitute: bool = True


class FullConfig(BaseModel):
    """[full] section."""

    model_config = {"frozen": True}

    pickle_protocol: int = Field(default=pickle.HIGHEST_PROTOCOL, ge=2, le=pickle.HIGHEST_PROTOCOL)
    enforce_markers: bool = True


class TextConfig(BaseModel):
    """[text] section."""

    model_config = {"frozen": True}

    max_document_bytes: int = Field(default=MAX_DOCUMENT_BYTES, gt=0)


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    entry_points: bool = True
    local_dir: str | None = None
