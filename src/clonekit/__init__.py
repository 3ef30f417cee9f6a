"""clonekit — deep object-graph cloning with depth-bounded fallbacks."""

from clonekit.api import clone, clone_value, configure
from clonekit.domain.markers import Serializable, serializable
from clonekit.domain.slot import Slot
from clonekit.domain.types import StatusCode
from clonekit.services.orchestrator import CloneService
from clonekit.services.result import CloneOutcome

__version__ = "0.1.0"

__all__ = [
    "CloneOutcome",
    "CloneService",
    "Serializable",
    "Slot",
    "StatusCode",
    "__version__",
    "clone",
    "clone_value",
    "configure",
    "serializable",
]
