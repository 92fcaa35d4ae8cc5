from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

import yaml
from loguru import logger
from pydantic import BaseModel, Field

Point = Tuple[float, float, float]
Pair = Tuple[int, int]


@dataclass(frozen=True)
class ProblemParameters:
    """Capacities and joint cost held for the life of a session."""

    tensile_capacity: float = 1.0
    compressive_capacity: float = 1.0
    joint_cost: float = 0.0

    def __post_init__(self):
        if self.tensile_capacity <= 0:
            raise ValueError("tensile_capacity must be positive")
        if self.compressive_capacity <= 0:
            raise ValueError("compressive_capacity must be positive")
        if self.joint_cost < 0:
            raise ValueError("joint_cost must be non-negative")

    def capacity(self, force: float) -> float:
        """Capacity that governs a member carrying ``force``."""
        return self.tensile_capacity if force >= 0 else self.compressive_capacity


class PotentialStructure(BaseModel):
    """Candidate members that are not yet part of the structure."""

    nodes: List[Point] = Field(description="Node positions of the candidate set")
    members: List[Pair] = Field(
        default_factory=list, description="Candidate members as node index pairs"
    )


class TrussProblem(BaseModel):
    # Structure
    nodes: List[Point] = Field(min_length=1, description="Node positions")
    members: List[Pair] = Field(
        default_factory=list, description="Members as pairs of node indices"
    )
    potentials: Optional[PotentialStructure] = Field(
        None, description="Potential connections for the member-adding method"
    )

    # Boundary conditions, one entry per node
    fixities: List[Tuple[bool, bool, bool]] = Field(
        description="Per-axis support flags (true = fixed)"
    )
    loads: List[Point] = Field(description="Nodal load vectors")

    # Material limits
    tensile_capacity: float = Field(1.0, gt=0, description="Tensile capacity")
    compressive_capacity: float = Field(1.0, gt=0, description="Compressive capacity")
    joint_cost: float = Field(0.0, ge=0, description="Joint cost")

    @property
    def parameters(self) -> ProblemParameters:
        return ProblemParameters(
            tensile_capacity=self.tensile_capacity,
            compressive_capacity=self.compressive_capacity,
            joint_cost=self.joint_cost,
        )


def load_problem(path: Union[str, Path]) -> TrussProblem:
    """Read a problem from a JSON or YAML file."""
    path = Path(path)
    logger.debug(f"Loading problem from {path}")
    text = path.read_text()

    if path.suffix.lower() in (".yaml", ".yml"):
        problem = TrussProblem.model_validate(yaml.safe_load(text))
    else:
        problem = TrussProblem.model_validate_json(text)

    logger.debug(
        f"Loaded problem: {len(problem.nodes)} nodes, {len(problem.members)} members"
    )
    return problem
