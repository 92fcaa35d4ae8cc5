"""Freely available LP backend using HiGHS through SciPy."""

import asyncio
import time

import numpy as np
import scipy
from scipy.optimize import linprog
from loguru import logger

from ..layout.formulation import LinearProgram
from .protocol import SolveResult


class HighsBackend:
    """Solves layout LPs with ``scipy.optimize.linprog`` and the HiGHS solvers.

    ``method`` may be ``"highs"`` (automatic choice), ``"highs-ds"`` (dual
    simplex) or ``"highs-ipm"`` (interior point).
    """

    def __init__(self, method: str = "highs"):
        self._backend_name = "HiGHS"
        self._backend_version = scipy.__version__
        self.method = method

    def solve(self, lp: LinearProgram) -> SolveResult:
        """Solve the LP and return forces, duals and diagnostics."""
        start = time.perf_counter()
        try:
            res = linprog(
                c=lp.c,
                A_eq=lp.A_eq if lp.n_constraints else None,
                b_eq=lp.b_eq if lp.n_constraints else None,
                bounds=lp.bounds,
                method=self.method,
            )
        except Exception as e:
            runtime = time.perf_counter() - start
            logger.error(f"HiGHS backend failed: {e}")
            return SolveResult.failure(str(e), runtime, self.backend_name)

        runtime = time.perf_counter() - start
        if not res.success:
            logger.warning(f"HiGHS reported status {res.status}: {res.message}")
            return SolveResult.failure(res.message, runtime, self.backend_name)

        if lp.n_constraints:
            duals = res.eqlin.marginals
        else:
            duals = np.zeros(0)

        logger.debug(f"HiGHS solved LP in {runtime:.3f}s, objective {res.fun:.6f}")
        return SolveResult.from_solution(
            lp, res.x, duals, res.fun, res.message, runtime, self.backend_name
        )

    async def solve_async(self, lp: LinearProgram) -> SolveResult:
        """Async version of solve."""
        return await asyncio.get_event_loop().run_in_executor(None, self.solve, lp)

    @property
    def backend_name(self) -> str:
        return self._backend_name

    @property
    def backend_version(self) -> str:
        return self._backend_version
