"""Problem input and ground-structure construction."""

from .problem import (
    TrussProblem,
    PotentialStructure,
    ProblemParameters,
    load_problem,
)
from .ground_structure import (
    GroundStructurePolicy,
    build_ground_structure,
    apply_boundary_conditions,
    fully_connect,
    default_potentials,
    build_potentials,
    check_dimensions,
)

__all__ = [
    "TrussProblem",
    "PotentialStructure",
    "ProblemParameters",
    "load_problem",
    "GroundStructurePolicy",
    "build_ground_structure",
    "apply_boundary_conditions",
    "fully_connect",
    "default_potentials",
    "build_potentials",
    "check_dimensions",
]
