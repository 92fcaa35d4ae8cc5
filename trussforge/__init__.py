"""
trussforge - minimum-volume truss layout optimisation.

Builds a ground structure from nodes, candidate members and boundary
conditions, solves the plastic layout LP with a pluggable backend and grows
the structure with the member-adding method until it converges.

Example:
    >>> from trussforge import OptimizationSession, SessionSettings, TrussProblem
    >>> session = OptimizationSession(SessionSettings(policy="member-adding"))
    >>> session.reset(problem)
    >>> session.run()
    >>> print(session.log_lines()[-1])
"""

__version__ = "0.1.0"

from .layout.session import (
    OptimizationSession,
    SessionSettings,
    SessionState,
    IterationRecord,
)
from .generator.problem import TrussProblem, PotentialStructure, ProblemParameters, load_problem
from .generator.ground_structure import GroundStructurePolicy, build_ground_structure
from .model import Graph, Node, Member, PotentialConnectionPool
from .errors import (
    TrussForgeError,
    DimensionMismatch,
    InvalidTopology,
    SolverFailure,
    SessionStateError,
)

__all__ = [
    "OptimizationSession",
    "SessionSettings",
    "SessionState",
    "IterationRecord",
    "TrussProblem",
    "PotentialStructure",
    "ProblemParameters",
    "load_problem",
    "GroundStructurePolicy",
    "build_ground_structure",
    "Graph",
    "Node",
    "Member",
    "PotentialConnectionPool",
    "TrussForgeError",
    "DimensionMismatch",
    "InvalidTopology",
    "SolverFailure",
    "SessionStateError",
]
