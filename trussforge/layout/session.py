"""
Optimisation session for adaptive truss layout optimisation.

A session owns the graph, the potential pool, the problem parameters and the
iteration log between resets. Each ``step()`` is one iteration: solve the
LP, evaluate the pool, grow the structure. The session performs no
concurrency of its own; ``run_async`` only moves the blocking loop onto an
executor so hosts can await it.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from loguru import logger
from pydantic import BaseModel

from ..config.optimizer_config import config
from ..errors import SessionStateError, SolverFailure
from ..generator.ground_structure import GroundStructurePolicy, build_ground_structure
from ..generator.problem import ProblemParameters, TrussProblem
from ..model.graph import Graph, Vector3
from ..model.pool import PotentialConnectionPool
from ..solvers.backend_registry import (
    DEFAULT_BACKEND,
    BackendRegistry,
    get_backend_registry,
)
from .formulation import formulate
from .member_adding import MemberAdder
from .postprocessor import BarSegment, active_bars, apply_solution, node_displacements


class SessionState(str, Enum):
    IDLE = "idle"
    SOLVING = "solving"
    EVALUATING = "evaluating"
    GROWING = "growing"
    CONVERGED = "converged"
    FAILED = "failed"


class IterationRecord(BaseModel):
    """One line of the iteration log.

    ``volume`` is the material volume of the solved layout. ``objective`` is
    the LP optimum, which also charges the joint cost on every member.
    """

    index: int
    volume: float
    members_added: int
    runtime: float
    backend: str = DEFAULT_BACKEND
    objective: Optional[float] = None

    def format(self) -> str:
        return (
            f"{self.index:3d}: vol.: {self.volume:9.6f} "
            f"add. :{self.members_added:4d} ({self.runtime:.3f}s)"
        )


@dataclass
class SessionSettings:
    """Host-selected options; may be changed between iterations."""

    policy: GroundStructurePolicy = GroundStructurePolicy.FROM_EXISTING_TOPOLOGY
    backend: str = DEFAULT_BACKEND
    threshold: Optional[float] = None  # None = configured default
    max_members_added: Optional[int] = None
    max_area: Optional[float] = None

    def __post_init__(self):
        self.policy = GroundStructurePolicy(self.policy)
        if self.max_area is not None and self.max_area <= 0:
            raise ValueError("max_area must be positive")


class OptimizationSession:
    """Owns one layout optimisation from reset to convergence."""

    def __init__(
        self,
        settings: Optional[SessionSettings] = None,
        registry: Optional[BackendRegistry] = None,
    ):
        self.settings = settings or SessionSettings()
        self._registry = registry or get_backend_registry()
        self._graph: Optional[Graph] = None
        self._pool: Optional[PotentialConnectionPool] = None
        self._parameters: Optional[ProblemParameters] = None
        self._log: List[IterationRecord] = []
        self._state = SessionState.IDLE
        self._volume: Optional[float] = None
        self._dirty = True  # Graph changed since the last successful solve
        self._stop_requested = False
        self._last_error: Optional[str] = None

    # Lifecycle

    def reset(self, problem: TrussProblem) -> None:
        """Rebuild graph, pool and parameters from ``problem`` and clear the log.

        The problem is fully validated before any session state changes.
        """
        graph, pool = build_ground_structure(problem, self.settings.policy)

        self._graph = graph
        self._pool = pool
        self._parameters = problem.parameters
        self._log = []
        self._state = SessionState.IDLE
        self._volume = None
        self._dirty = True
        self._stop_requested = False
        self._last_error = None
        logger.info(
            f"Session reset ({self.settings.policy.value}, backend {self.settings.backend})"
        )

    def stop(self) -> None:
        """Request the iteration loop to stop before the next solve."""
        self._stop_requested = True
        logger.info("Stop requested")

    def invalidate(self) -> None:
        """Mark the structure as changed so the next step solves again.

        Hosts that edit ``graph`` directly call this afterwards.
        """
        self._dirty = True
        if self._state == SessionState.CONVERGED:
            self._state = SessionState.IDLE

    def step(self) -> IterationRecord:
        """Run one solve/evaluate/grow iteration.

        If the session has converged and nothing changed since, the previous
        log entry is returned and nothing is solved or recorded.

        Raises:
            SolverFailure: The backend failed; graph and log are unchanged.
            SessionStateError: The session was never reset or has failed.
        """
        if self._graph is None:
            raise SessionStateError("Session has no structure; call reset() first")
        if self._state == SessionState.FAILED:
            raise SessionStateError(
                f"Session failed ({self._last_error}); reset() is required"
            )
        if self._state == SessionState.CONVERGED and not self._dirty:
            return self._log[-1]

        backend_name = self.settings.backend
        backend = self._registry.require_backend(backend_name)

        if self._graph.member_count == 0:
            self._fail("Structure has no members to carry the load", backend_name)

        self._state = SessionState.SOLVING
        lp = formulate(self._graph, self._parameters, self.settings.max_area)
        result = backend.solve(lp)
        if not result.success:
            self._fail(result.message, backend_name)

        volume = apply_solution(
            self._graph, lp, result.x, result.duals, self._parameters
        )

        self._state = SessionState.EVALUATING
        added = []
        if (
            self.settings.policy == GroundStructurePolicy.MEMBER_ADDING
            and self._pool is not None
        ):
            adder = MemberAdder(self.settings.threshold, self.settings.max_members_added)
            displacements = {node.id: node.displacement for node in self._graph.nodes}
            marked = adder.evaluate(self._pool, displacements, self._parameters)
            if marked:
                self._state = SessionState.GROWING
                added = adder.grow(self._graph, self._pool, marked)

        record = IterationRecord(
            index=len(self._log),
            volume=volume,
            members_added=len(added),
            runtime=result.runtime,
            backend=backend_name,
            objective=result.objective,
        )
        self._log.append(record)
        self._volume = volume
        self._dirty = bool(added)
        if not added:
            self._state = SessionState.CONVERGED
            logger.info(f"Converged after {len(self._log)} iterations")

        logger.info(record.format())
        return record

    def update(
        self, problem: Optional[TrussProblem] = None, reset: bool = False
    ) -> IterationRecord:
        """Host entry point for one trigger: optionally reset, then step."""
        if reset or self._graph is None:
            if problem is None:
                raise SessionStateError("A problem is required to reset the session")
            self.reset(problem)
        return self.step()

    def run(self, max_iterations: Optional[int] = None) -> List[IterationRecord]:
        """Iterate until converged, stopped or ``max_iterations`` is reached.

        Returns the records produced by this call.
        """
        if max_iterations is None:
            max_iterations = config.member_adding.MAX_ITERATIONS

        records = []
        if self.converged:
            return records

        for _ in range(max_iterations):
            if self._stop_requested:
                logger.info(f"Stopped after {len(self._log)} iterations")
                break
            records.append(self.step())
            if self.converged:
                break
        else:
            logger.warning(f"No convergence within {max_iterations} iterations")

        return records

    async def run_async(
        self, max_iterations: Optional[int] = None
    ) -> List[IterationRecord]:
        """Async version of run; iterations still execute one at a time."""
        return await asyncio.get_event_loop().run_in_executor(
            None, self.run, max_iterations
        )

    def _fail(self, message: str, backend_name: str) -> None:
        self._state = SessionState.FAILED
        self._last_error = message
        logger.error(f"Solve failed ({backend_name}): {message}")
        raise SolverFailure(message, backend_name)

    # Results

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def converged(self) -> bool:
        return self._state == SessionState.CONVERGED

    @property
    def stopped(self) -> bool:
        return self._stop_requested

    @property
    def running(self) -> bool:
        """True while a recurring trigger should keep invoking the session.

        This is the stop signal for hosts: it turns false once the session
        converges, fails or is asked to stop.
        """
        return (
            self._graph is not None
            and not self._stop_requested
            and self._state not in (SessionState.CONVERGED, SessionState.FAILED)
        )

    @property
    def graph(self) -> Optional[Graph]:
        return self._graph

    @property
    def pool(self) -> Optional[PotentialConnectionPool]:
        return self._pool

    @property
    def parameters(self) -> Optional[ProblemParameters]:
        return self._parameters

    @property
    def volume(self) -> Optional[float]:
        return self._volume

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def log(self) -> List[IterationRecord]:
        return list(self._log)

    def log_lines(self) -> List[str]:
        return [record.format() for record in self._log]

    def bars(self) -> List[BarSegment]:
        if self._graph is None:
            return []
        return active_bars(self._graph)

    def displacements(self) -> List[Vector3]:
        if self._graph is None:
            return []
        return node_displacements(self._graph)
