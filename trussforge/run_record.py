"""Run Record schema for tracking optimisation runs.

This module provides the record that links the problem summary, session
settings, iteration log and final result geometry of each run.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from pydantic import BaseModel, Field

from .layout.session import IterationRecord, OptimizationSession


class RunStatus(str, Enum):
    """Status of a run record."""

    CONVERGED = "CONVERGED"
    STOPPED = "STOPPED"
    FAILED = "FAILED"
    PENDING = "PENDING"


class ProblemSummary(BaseModel):
    """Size and limits of the optimised problem."""

    node_count: int
    member_count: int
    potential_count: Optional[int] = None
    tensile_capacity: float
    compressive_capacity: float
    joint_cost: float


class BarRecord(BaseModel):
    """A stressed member of the final layout."""

    member_id: int
    start: Tuple[float, float, float]
    end: Tuple[float, float, float]
    force: float
    area: float
    radius: float
    colour: Tuple[int, int, int]


class RunRecord(BaseModel):
    """Record of one optimisation run."""

    # Core identification
    run_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    # Input
    problem_file: Optional[str] = None
    problem: Optional[ProblemSummary] = None
    settings: Dict[str, Any] = Field(default_factory=dict)

    # Results
    iterations: List[IterationRecord] = Field(default_factory=list)
    volume: Optional[float] = None
    bars: List[BarRecord] = Field(default_factory=list)
    displacements: List[Tuple[float, float, float]] = Field(default_factory=list)

    # Overall status
    status: RunStatus = RunStatus.PENDING

    # Execution metadata
    execution_time_seconds: Optional[float] = None
    error_message: Optional[str] = None

    def capture_session(self, session: OptimizationSession) -> None:
        """Copy the log and result geometry out of a session."""
        self.iterations = session.log
        self.volume = session.volume
        self.bars = [
            BarRecord(
                member_id=bar.member_id,
                start=bar.start,
                end=bar.end,
                force=bar.force,
                area=bar.area,
                radius=bar.radius,
                colour=bar.colour,
            )
            for bar in session.bars()
        ]
        self.displacements = session.displacements()

        graph = session.graph
        parameters = session.parameters
        if graph is not None and parameters is not None:
            self.problem = ProblemSummary(
                node_count=graph.node_count,
                member_count=graph.member_count,
                potential_count=len(session.pool) if session.pool is not None else None,
                tensile_capacity=parameters.tensile_capacity,
                compressive_capacity=parameters.compressive_capacity,
                joint_cost=parameters.joint_cost,
            )

    def set_status(self, status: RunStatus, error_message: Optional[str] = None) -> None:
        """Set the overall status of the run record."""
        self.status = status
        if error_message:
            self.error_message = error_message

    def log_lines(self) -> List[str]:
        return [record.format() for record in self.iterations]

    def save_to_file(self, output_path: Path) -> None:
        """Save the run record to a JSON file."""
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w") as f:
            f.write(self.model_dump_json(indent=2))

        logger.info(f"Run record saved to {output_path}")

    @classmethod
    def load_from_file(cls, file_path: Path) -> "RunRecord":
        """Load a run record from a JSON file."""
        with open(file_path, "r") as f:
            data = f.read()
        return cls.model_validate_json(data)
