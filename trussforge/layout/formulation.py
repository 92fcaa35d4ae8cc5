"""
Linear-programming formulation of plastic truss layout optimisation.

For every node and every free axis one equilibrium row is emitted: the
member forces acting on the node balance the applied load. Fixed axes emit
no row, the support reaction absorbs the imbalance and the displacement is
zero. Each member carries two non-negative variables, its tension part ``t``
and compression part ``c``, so the axial force is ``t - c`` and the area is
``t / tensile + c / compressive``. The objective is the structural volume
with the joint cost added to every member as extra length.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np
from scipy.sparse import coo_matrix, csr_matrix, hstack
from loguru import logger

from ..model.graph import Graph, Vector3
from ..generator.problem import ProblemParameters

AXES = 3


@dataclass
class LinearProgram:
    """Equality-form LP: minimise ``c @ x`` s.t. ``A_eq @ x == b_eq``, ``x >= 0``."""

    c: np.ndarray
    A_eq: csr_matrix
    b_eq: np.ndarray
    upper: Optional[np.ndarray]  # None = unbounded above
    member_ids: List[int]
    node_ids: List[int]
    rows: List[Tuple[int, int]]  # (node id, axis) per equilibrium row
    lengths: np.ndarray
    parameters: ProblemParameters

    @property
    def n_members(self) -> int:
        return len(self.member_ids)

    @property
    def n_variables(self) -> int:
        return 2 * len(self.member_ids)

    @property
    def n_constraints(self) -> int:
        return len(self.rows)

    @property
    def bounds(self) -> List[Tuple[float, Optional[float]]]:
        """Variable bounds in the form expected by ``scipy.optimize.linprog``."""
        if self.upper is None:
            return [(0.0, None)] * self.n_variables
        return [(0.0, float(u)) for u in self.upper]


def free_rows(graph: Graph) -> List[Tuple[int, int]]:
    """(node id, axis) for every unfixed axis, in node insertion order."""
    return [
        (node.id, axis)
        for node in graph.nodes
        for axis in range(AXES)
        if not node.fixity[axis]
    ]


def equilibrium_matrix(
    graph: Graph, rows: List[Tuple[int, int]], member_ids: List[int]
) -> csr_matrix:
    """Matrix ``C`` with ``C @ forces == loads`` at the free degrees of freedom.

    A member running from node ``a`` to node ``b`` along unit vector ``e``
    contributes ``-e`` at ``a`` and ``+e`` at ``b``. With this sign the dual
    of a row is the node's virtual displacement and ``C.T @ u`` is the
    elongation of each member.
    """
    row_index = {row: i for i, row in enumerate(rows)}
    data, row_ind, col_ind = [], [], []

    for col, member_id in enumerate(member_ids):
        member = graph.member(member_id)
        direction = graph.direction(member_id)
        for node_id, sign in ((member.start, -1.0), (member.end, 1.0)):
            for axis in range(AXES):
                i = row_index.get((node_id, axis))
                if i is None or direction[axis] == 0.0:
                    continue
                data.append(sign * direction[axis])
                row_ind.append(i)
                col_ind.append(col)

    return coo_matrix(
        (data, (row_ind, col_ind)), shape=(len(rows), len(member_ids))
    ).tocsr()


def formulate(
    graph: Graph,
    parameters: ProblemParameters,
    max_area: Optional[float] = None,
) -> LinearProgram:
    """Build the minimum-volume LP for the current graph."""
    member_ids = graph.member_ids
    rows = free_rows(graph)
    lengths = np.array([graph.member(m).length for m in member_ids], dtype=float)

    C = equilibrium_matrix(graph, rows, member_ids)
    if rows:
        A_eq = hstack([C, -C], format="csr")
    else:
        A_eq = csr_matrix((0, 2 * len(member_ids)))
    b_eq = np.array([graph.node(n).load[axis] for n, axis in rows], dtype=float)

    effective = lengths + parameters.joint_cost
    c = np.concatenate(
        [
            effective / parameters.tensile_capacity,
            effective / parameters.compressive_capacity,
        ]
    )

    upper = None
    if max_area is not None:
        upper = np.concatenate(
            [
                np.full(len(member_ids), max_area * parameters.tensile_capacity),
                np.full(len(member_ids), max_area * parameters.compressive_capacity),
            ]
        )

    logger.debug(
        f"Formulated LP: {2 * len(member_ids)} variables, {len(rows)} equilibrium rows"
    )
    return LinearProgram(
        c=c,
        A_eq=A_eq,
        b_eq=b_eq,
        upper=upper,
        member_ids=member_ids,
        node_ids=graph.node_ids,
        rows=rows,
        lengths=lengths,
        parameters=parameters,
    )


def recover_member_forces(lp: LinearProgram, x: np.ndarray) -> Dict[int, float]:
    """Axial force (tension positive) per member id."""
    n = lp.n_members
    forces = np.asarray(x[:n]) - np.asarray(x[n:])
    return {member_id: float(f) for member_id, f in zip(lp.member_ids, forces)}


def recover_displacements(lp: LinearProgram, duals: np.ndarray) -> Dict[int, Vector3]:
    """Virtual displacement per node id; fixed axes are exactly zero."""
    values = {node_id: [0.0, 0.0, 0.0] for node_id in lp.node_ids}
    for (node_id, axis), u in zip(lp.rows, duals):
        values[node_id][axis] = float(u)
    return {node_id: tuple(v) for node_id, v in values.items()}
