"""
Ground-structure construction.

Builds the main graph (and, for the member-adding method, the potential
connection pool) from a TrussProblem according to a construction policy.
"""

from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from ..config.optimizer_config import config
from ..errors import DimensionMismatch, InvalidTopology
from ..model.graph import Graph
from ..model.pool import PotentialConnectionPool
from .problem import PotentialStructure, TrussProblem


class GroundStructurePolicy(str, Enum):
    FROM_EXISTING_TOPOLOGY = "existing"  # Copy the supplied members 1:1
    FULLY_CONNECTED = "fully-connected"  # Every pair of nodes
    MEMBER_ADDING = "member-adding"  # Supplied members plus a candidate pool


def check_dimensions(problem: TrussProblem) -> None:
    """Raise DimensionMismatch unless every boundary list matches the nodes."""
    n_nodes = len(problem.nodes)
    if len(problem.fixities) != n_nodes:
        raise DimensionMismatch("Fixity", n_nodes, len(problem.fixities))
    if len(problem.loads) != n_nodes:
        raise DimensionMismatch("Load", n_nodes, len(problem.loads))


def _add_members(graph: Graph, node_ids: List[int], pairs: Sequence[Tuple[int, int]]):
    for i, j in pairs:
        if not (0 <= i < len(node_ids) and 0 <= j < len(node_ids)):
            raise InvalidTopology(
                f"Member ({i}, {j}) references a node outside 0..{len(node_ids) - 1}"
            )
        graph.add_member(node_ids[i], node_ids[j])


def apply_boundary_conditions(
    graph: Graph,
    node_ids: List[int],
    fixities: Sequence[Sequence[bool]],
    loads: Sequence[Sequence[float]],
) -> None:
    """Set fixity and load node by node, in the order of ``node_ids``."""
    if len(fixities) != len(node_ids):
        raise DimensionMismatch("Fixity", len(node_ids), len(fixities))
    if len(loads) != len(node_ids):
        raise DimensionMismatch("Load", len(node_ids), len(loads))

    for node_id, fixity, load in zip(node_ids, fixities, loads):
        node = graph.node(node_id)
        node.fixity = tuple(bool(f) for f in fixity)
        node.load = tuple(float(f) for f in load)


def fully_connect(graph: Graph) -> int:
    """Replace all members by one member per unordered pair of nodes.

    Pairs are created in ascending index order. Returns the member count.
    """
    graph.remove_members(graph.member_ids)
    node_ids = graph.node_ids
    for i in range(len(node_ids)):
        for j in range(i + 1, len(node_ids)):
            graph.add_member(node_ids[i], node_ids[j])
    logger.debug(f"Fully-connected ground structure: {graph.member_count} members")
    return graph.member_count


def default_potentials(graph: Graph) -> PotentialConnectionPool:
    """Pool of every node pair not already joined in ``graph``."""
    pool_graph = Graph()
    node_map = {}
    for node in graph.nodes:
        pool_id = pool_graph.add_node(node.position)
        node_map[pool_id] = node.id

    pool_ids = pool_graph.node_ids
    for i in range(len(pool_ids)):
        for j in range(i + 1, len(pool_ids)):
            if not graph.has_member_between(node_map[pool_ids[i]], node_map[pool_ids[j]]):
                pool_graph.add_member(pool_ids[i], pool_ids[j])

    logger.debug(f"Generated {pool_graph.member_count} potential connections")
    return PotentialConnectionPool(pool_graph, node_map)


def build_potentials(
    potentials: PotentialStructure, graph: Graph, tolerance: Optional[float] = None
) -> PotentialConnectionPool:
    """Build a pool from host-supplied potentials.

    Each potential node must coincide with a node of ``graph``.
    """
    if tolerance is None:
        tolerance = config.tolerances.NODE_MATCH_TOL

    positions = np.array([node.position for node in graph.nodes], dtype=float)
    main_ids = graph.node_ids

    pool_graph = Graph()
    node_map = {}
    pool_ids = []
    for index, point in enumerate(potentials.nodes):
        distances = np.linalg.norm(positions - np.asarray(point, dtype=float), axis=1)
        nearest = int(np.argmin(distances))
        if distances[nearest] > tolerance:
            raise InvalidTopology(
                f"Potential node {index} at {tuple(point)} does not coincide "
                f"with any structure node"
            )
        pool_id = pool_graph.add_node(point)
        node_map[pool_id] = main_ids[nearest]
        pool_ids.append(pool_id)

    _add_members(pool_graph, pool_ids, potentials.members)
    logger.debug(f"Loaded {pool_graph.member_count} potential connections")
    return PotentialConnectionPool(pool_graph, node_map)


def build_ground_structure(
    problem: TrussProblem,
    policy: GroundStructurePolicy = GroundStructurePolicy.FROM_EXISTING_TOPOLOGY,
) -> Tuple[Graph, Optional[PotentialConnectionPool]]:
    """Construct the main graph and, for member adding, the potential pool.

    Raises:
        DimensionMismatch: Fixity or load list length differs from node count.
        InvalidTopology: A member references an unknown or repeated node.
    """
    check_dimensions(problem)

    graph = Graph()
    node_ids = [graph.add_node(p) for p in problem.nodes]
    _add_members(graph, node_ids, problem.members)
    apply_boundary_conditions(graph, node_ids, problem.fixities, problem.loads)

    pool = None
    if policy == GroundStructurePolicy.FULLY_CONNECTED:
        fully_connect(graph)
    elif policy == GroundStructurePolicy.MEMBER_ADDING:
        if problem.potentials is not None:
            pool = build_potentials(problem.potentials, graph)
        else:
            pool = default_potentials(graph)

    logger.info(
        f"Built {policy.value} ground structure: {graph.node_count} nodes, "
        f"{graph.member_count} members"
        + (f", {len(pool)} potentials" if pool is not None else "")
    )
    return graph, pool
