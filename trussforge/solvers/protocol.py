"""Protocol definition for all LP backends."""

from dataclasses import dataclass, field
from typing import Optional, Protocol

import numpy as np

from ..layout.formulation import LinearProgram


@dataclass
class SolveResult:
    """Outcome of one LP solve.

    ``forces`` are the axial member forces (tension positive) in the order of
    ``LinearProgram.member_ids``; ``duals`` are the sensitivities of the
    objective to the equilibrium right-hand sides, one per row.
    """

    success: bool
    message: str
    runtime: float
    backend: str
    x: np.ndarray = field(default_factory=lambda: np.zeros(0))
    forces: np.ndarray = field(default_factory=lambda: np.zeros(0))
    duals: np.ndarray = field(default_factory=lambda: np.zeros(0))
    objective: Optional[float] = None

    @classmethod
    def failure(cls, message: str, runtime: float, backend: str) -> "SolveResult":
        return cls(success=False, message=message, runtime=runtime, backend=backend)

    @classmethod
    def from_solution(
        cls,
        lp: LinearProgram,
        x: np.ndarray,
        duals: np.ndarray,
        objective: float,
        message: str,
        runtime: float,
        backend: str,
    ) -> "SolveResult":
        x = np.asarray(x, dtype=float)
        n = lp.n_members
        return cls(
            success=True,
            message=message,
            runtime=runtime,
            backend=backend,
            x=x,
            forces=x[:n] - x[n:],
            duals=np.asarray(duals, dtype=float),
            objective=float(objective),
        )


class LPBackend(Protocol):
    """Protocol for all LP backends.

    Backends are interchangeable: callers select one by name from the
    registry and never inspect its type. Numerical failure is reported
    through ``SolveResult.success`` and ``SolveResult.message``, not raised.
    """

    def solve(self, lp: LinearProgram) -> SolveResult:
        """Solve a layout LP.

        Args:
            lp: Equality-form minimum-volume program

        Returns:
            SolveResult with forces, duals, objective, success flag,
            backend message and wall-clock runtime in seconds
        """
        ...

    async def solve_async(self, lp: LinearProgram) -> SolveResult:
        """Async version of solve for hosts that must stay responsive."""
        ...

    @property
    def backend_name(self) -> str:
        """Human-readable name of this backend."""
        ...

    @property
    def backend_version(self) -> str:
        """Version string for reproducibility."""
        ...
