"""LP backends for layout optimisation.

This module provides a single interface over interchangeable linear
programming backends.
"""

from .protocol import LPBackend, SolveResult
from .highs_backend import HighsBackend
from .mosek_backend import MosekBackend, MOSEK_AVAILABLE
from .backend_registry import BackendRegistry, get_backend_registry, DEFAULT_BACKEND

__all__ = [
    "LPBackend",
    "SolveResult",
    "HighsBackend",
    "MosekBackend",
    "MOSEK_AVAILABLE",
    "BackendRegistry",
    "get_backend_registry",
    "DEFAULT_BACKEND",
]
