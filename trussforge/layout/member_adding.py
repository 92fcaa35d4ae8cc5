"""
Member-adding step of adaptive layout optimisation.

After a solve, the duals of the equilibrium rows form a virtual displacement
field. An active member satisfies ``tensile * elongation <= length`` (and
the compressive counterpart); a candidate that would violate this bound could
lower the volume if it were added. Candidates whose normalised virtual strain
exceeds ``1 + threshold`` are promoted into the structure.
"""

from typing import Dict, List, Optional

import numpy as np
from loguru import logger

from ..config.optimizer_config import config
from ..generator.problem import ProblemParameters
from ..model.graph import Graph, Vector3
from ..model.pool import PotentialConnectionPool


def virtual_strains(
    pool: PotentialConnectionPool,
    displacements: Dict[int, Vector3],
    parameters: ProblemParameters,
    candidates: Optional[List[int]] = None,
) -> Dict[int, float]:
    """Normalised virtual strain of each unpromoted candidate.

    A value of 1.0 means the candidate sits exactly on the dual limit; the
    excess over 1.0 estimates how strongly adding it would pay off.
    """
    if candidates is None:
        candidates = pool.candidates()
    if not candidates:
        return {}

    starts, ends, directions, lengths = [], [], [], []
    for candidate in candidates:
        a, b = pool.main_endpoints(candidate)
        starts.append(displacements[a])
        ends.append(displacements[b])
        directions.append(pool.graph.direction(candidate))
        lengths.append(pool.graph.member(candidate).length)

    elongation = np.einsum(
        "ij,ij->i", np.array(directions), np.array(ends) - np.array(starts)
    )
    effective = np.array(lengths) + parameters.joint_cost
    scaled = np.maximum(
        parameters.tensile_capacity * elongation,
        -parameters.compressive_capacity * elongation,
    )
    strain = np.divide(
        scaled, effective, out=np.zeros_like(scaled), where=effective > 0
    )
    return {candidate: float(y) for candidate, y in zip(candidates, strain)}


def select_violations(
    strains: Dict[int, float], threshold: float, max_members: int = 0
) -> List[int]:
    """Candidates with ``strain > 1 + threshold``, most violated first.

    ``max_members`` caps the selection; 0 means no cap.
    """
    limit = 1.0 + threshold
    violated = [(y, c) for c, y in strains.items() if y > limit]
    violated.sort(key=lambda item: (-item[0], item[1]))
    if max_members:
        violated = violated[:max_members]
    return [c for _, c in violated]


class MemberAdder:
    """Evaluates the potential pool and grows the structure."""

    def __init__(
        self,
        threshold: Optional[float] = None,
        max_members_added: Optional[int] = None,
    ):
        self.threshold = (
            config.member_adding.VIOLATION_THRESHOLD if threshold is None else threshold
        )
        self.max_members_added = (
            config.member_adding.MAX_MEMBERS_ADDED
            if max_members_added is None
            else max_members_added
        )
        if self.threshold < 0:
            raise ValueError("threshold must be non-negative")
        if self.max_members_added < 0:
            raise ValueError("max_members_added must be non-negative")

    def evaluate(
        self,
        pool: PotentialConnectionPool,
        displacements: Dict[int, Vector3],
        parameters: ProblemParameters,
    ) -> List[int]:
        """Mark the candidates that should be promoted."""
        strains = virtual_strains(pool, displacements, parameters)
        marked = select_violations(strains, self.threshold, self.max_members_added)
        if strains:
            logger.debug(
                f"Evaluated {len(strains)} candidates, max strain "
                f"{max(strains.values()):.4f}, {len(marked)} marked"
            )
        return marked

    def grow(
        self, graph: Graph, pool: PotentialConnectionPool, marked: List[int]
    ) -> List[int]:
        """Promote marked candidates into ``graph``; returns the new member ids."""
        added = pool.promote(graph, marked)
        if added:
            logger.info(f"Added {len(added)} members ({pool.remaining} potentials left)")
        return added
