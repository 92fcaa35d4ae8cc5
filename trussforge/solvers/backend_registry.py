"""Backend registry for selecting LP backends by name."""

from typing import Dict, List, Optional

from loguru import logger

from ..layout.formulation import LinearProgram
from .protocol import LPBackend, SolveResult
from .highs_backend import HighsBackend
from .mosek_backend import MosekBackend

DEFAULT_BACKEND = "highs"


class BackendRegistry:
    """Registry for managing all LP backends.

    Callers pick a backend by configuration (its registered name); every
    backend exposes the same ``solve(lp)`` interface.
    """

    def __init__(self):
        self._backends: Dict[str, LPBackend] = {}
        self._register_default_backends()

    def _register_default_backends(self):
        """Register all default backends."""
        self.register_backend("highs", HighsBackend())
        self.register_backend("mosek", MosekBackend())

    def register_backend(self, name: str, backend: LPBackend):
        """Register a backend with the registry."""
        self._backends[name] = backend
        logger.debug(
            f"Registered backend: {name} ({backend.backend_name} v{backend.backend_version})"
        )

    def get_backend(self, name: str) -> Optional[LPBackend]:
        """Get a backend by name."""
        return self._backends.get(name)

    def require_backend(self, name: str) -> LPBackend:
        """Get a backend by name, raising ValueError if it is unknown."""
        backend = self.get_backend(name)
        if backend is None:
            raise ValueError(
                f"Backend '{name}' not found (available: {', '.join(self.list_backends())})"
            )
        return backend

    def list_backends(self) -> List[str]:
        """List all registered backend names."""
        return list(self._backends.keys())

    def solve(self, backend_name: str, lp: LinearProgram) -> SolveResult:
        """Solve with the named backend."""
        return self.require_backend(backend_name).solve(lp)

    def get_backend_info(self) -> Dict[str, Dict[str, str]]:
        """Get information about all registered backends."""
        info = {}
        for name, backend in self._backends.items():
            info[name] = {
                "name": backend.backend_name,
                "version": backend.backend_version,
                "class": backend.__class__.__name__,
            }
        return info


# Global registry instance
_registry_instance: Optional[BackendRegistry] = None


def get_backend_registry() -> BackendRegistry:
    """Get the global backend registry instance."""
    global _registry_instance

    if _registry_instance is None:
        _registry_instance = BackendRegistry()

    return _registry_instance
