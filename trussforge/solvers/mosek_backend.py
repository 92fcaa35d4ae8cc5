"""Commercial LP backend using the MOSEK Fusion API.

MOSEK needs a licence. When the package is not installed the backend stays
registered and every solve reports a failure explaining why.
"""

import asyncio
import time

import numpy as np
from loguru import logger

from ..layout.formulation import LinearProgram
from .protocol import SolveResult

try:
    import mosek
    from mosek.fusion import (
        Domain,
        Expr,
        Matrix,
        Model,
        ObjectiveSense,
        SolutionStatus,
    )

    MOSEK_AVAILABLE = True
except ImportError:
    logger.debug("MOSEK not available - the mosek backend will report failures")
    MOSEK_AVAILABLE = False


class MosekBackend:
    """Solves layout LPs with MOSEK."""

    def __init__(self):
        self._backend_name = "MOSEK"
        if MOSEK_AVAILABLE:
            major, minor, revision = mosek.Env.getversion()
            self._backend_version = f"{major}.{minor}.{revision}"
        else:
            self._backend_version = "unavailable"

    def solve(self, lp: LinearProgram) -> SolveResult:
        """Solve the LP and return forces, duals and diagnostics."""
        start = time.perf_counter()
        if not MOSEK_AVAILABLE:
            return SolveResult.failure(
                "MOSEK is not installed (pip install mosek and add a licence)",
                time.perf_counter() - start,
                self.backend_name,
            )

        try:
            with Model("layout") as model:
                x = model.variable("x", lp.n_variables, Domain.greaterThan(0.0))
                if lp.upper is not None:
                    model.constraint("area_limit", x, Domain.lessThan(lp.upper.tolist()))

                equilibrium = None
                if lp.n_constraints:
                    A = lp.A_eq.tocoo()
                    matrix = Matrix.sparse(
                        lp.n_constraints,
                        lp.n_variables,
                        A.row.tolist(),
                        A.col.tolist(),
                        A.data.tolist(),
                    )
                    equilibrium = model.constraint(
                        "equilibrium",
                        Expr.mul(matrix, x),
                        Domain.equalsTo(lp.b_eq.tolist()),
                    )

                model.objective("volume", ObjectiveSense.Minimize, Expr.dot(lp.c.tolist(), x))
                model.solve()

                status = model.getPrimalSolutionStatus()
                if status != SolutionStatus.Optimal:
                    runtime = time.perf_counter() - start
                    message = f"MOSEK solution status: {status}"
                    logger.warning(message)
                    return SolveResult.failure(message, runtime, self.backend_name)

                levels = np.array(x.level())
                duals = np.array(equilibrium.dual()) if equilibrium is not None else np.zeros(0)
                objective = model.primalObjValue()
        except Exception as e:
            runtime = time.perf_counter() - start
            logger.error(f"MOSEK backend failed: {e}")
            return SolveResult.failure(str(e), runtime, self.backend_name)

        runtime = time.perf_counter() - start
        logger.debug(f"MOSEK solved LP in {runtime:.3f}s, objective {objective:.6f}")
        return SolveResult.from_solution(
            lp, levels, duals, objective, "Optimal", runtime, self.backend_name
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
