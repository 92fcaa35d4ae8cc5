"""
Node/member container for ground-structure optimisation.

The graph is an arena: nodes and members are addressed by integer ids that
are never reused, so the member-adding loop can track which candidates are
already active and cascade deletion stays cheap.
"""

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple

from loguru import logger

from ..errors import InvalidTopology

Vector3 = Tuple[float, float, float]
Fixity = Tuple[bool, bool, bool]
Colour = Tuple[int, int, int]

FREE: Fixity = (False, False, False)
ZERO: Vector3 = (0.0, 0.0, 0.0)
GREY: Colour = (128, 128, 128)


def _as_vector(values: Iterable[float]) -> Vector3:
    x, y, z = (float(v) for v in values)
    return (x, y, z)


@dataclass
class Node:
    """A joint of the structure."""

    id: int
    position: Vector3
    fixity: Fixity = FREE  # True = axis fixed (support)
    load: Vector3 = ZERO
    displacement: Vector3 = ZERO

    def is_fixed(self, axis: int) -> bool:
        return self.fixity[axis]

    @property
    def is_support(self) -> bool:
        return any(self.fixity)


@dataclass
class Member:
    """A bar joining two nodes of the same graph."""

    id: int
    start: int
    end: int
    length: float
    force: float = 0.0  # Positive = tension
    area: float = 0.0
    radius: float = 0.0
    colour: Colour = GREY

    @property
    def endpoints(self) -> Tuple[int, int]:
        return (self.start, self.end)

    def reset_state(self) -> None:
        """Forget the solved state, as for a freshly added member."""
        self.force = 0.0
        self.area = 0.0
        self.radius = 0.0
        self.colour = GREY


class Graph:
    """Truss structure: nodes and members keyed by stable ids."""

    def __init__(self):
        self._nodes: Dict[int, Node] = {}
        self._members: Dict[int, Member] = {}
        self._incidence: Dict[int, Set[int]] = {}  # node id -> member ids
        self._next_node_id = 0
        self._next_member_id = 0

    # Mutation

    def add_node(
        self,
        position: Iterable[float],
        fixity: Optional[Iterable[bool]] = None,
        load: Optional[Iterable[float]] = None,
    ) -> int:
        """Add a node and return its id."""
        node_id = self._next_node_id
        self._next_node_id += 1

        node = Node(id=node_id, position=_as_vector(position))
        if fixity is not None:
            node.fixity = tuple(bool(f) for f in fixity)
        if load is not None:
            node.load = _as_vector(load)

        self._nodes[node_id] = node
        self._incidence[node_id] = set()
        return node_id

    def add_member(self, start: int, end: int) -> int:
        """Join two existing nodes with a new member and return its id.

        Raises:
            InvalidTopology: If either node is absent or both ids are equal.
        """
        if start not in self._nodes:
            raise InvalidTopology(f"Member start node {start} is not in the graph")
        if end not in self._nodes:
            raise InvalidTopology(f"Member end node {end} is not in the graph")
        if start == end:
            raise InvalidTopology(f"Member cannot join node {start} to itself")

        length = math.dist(self._nodes[start].position, self._nodes[end].position)
        if length == 0.0:
            logger.warning(f"Member between nodes {start} and {end} has zero length")

        member_id = self._next_member_id
        self._next_member_id += 1

        self._members[member_id] = Member(
            id=member_id, start=start, end=end, length=length
        )
        self._incidence[start].add(member_id)
        self._incidence[end].add(member_id)
        return member_id

    def remove_members(self, member_ids: Iterable[int]) -> None:
        """Delete members; unknown ids are ignored."""
        for member_id in list(member_ids):
            member = self._members.pop(member_id, None)
            if member is None:
                continue
            self._incidence[member.start].discard(member_id)
            self._incidence[member.end].discard(member_id)

    def remove_nodes(self, node_ids: Iterable[int]) -> None:
        """Delete nodes together with every incident member."""
        for node_id in list(node_ids):
            if node_id not in self._nodes:
                continue
            self.remove_members(self._incidence[node_id])
            del self._incidence[node_id]
            del self._nodes[node_id]

    # Access

    def node(self, node_id: int) -> Node:
        return self._nodes[node_id]

    def member(self, member_id: int) -> Member:
        return self._members[member_id]

    def has_node(self, node_id: int) -> bool:
        return node_id in self._nodes

    def has_member(self, member_id: int) -> bool:
        return member_id in self._members

    @property
    def nodes(self) -> List[Node]:
        """Nodes in insertion order."""
        return list(self._nodes.values())

    @property
    def members(self) -> List[Member]:
        """Members in insertion order."""
        return list(self._members.values())

    @property
    def node_ids(self) -> List[int]:
        return list(self._nodes.keys())

    @property
    def member_ids(self) -> List[int]:
        return list(self._members.keys())

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def member_count(self) -> int:
        return len(self._members)

    def incident_members(self, node_id: int) -> List[int]:
        return sorted(self._incidence[node_id])

    def has_member_between(self, a: int, b: int) -> bool:
        """True if any member joins ``a`` and ``b`` in either direction."""
        if a not in self._incidence or b not in self._incidence:
            return False
        return any(
            self._members[m].start in (a, b) and self._members[m].end in (a, b)
            for m in self._incidence[a]
        )

    def direction(self, member_id: int) -> Vector3:
        """Unit vector from the member's start node to its end node."""
        member = self._members[member_id]
        p = self._nodes[member.start].position
        q = self._nodes[member.end].position
        if member.length == 0.0:
            return ZERO
        return (
            (q[0] - p[0]) / member.length,
            (q[1] - p[1]) / member.length,
            (q[2] - p[2]) / member.length,
        )

    def segment(self, member_id: int) -> Tuple[Vector3, Vector3]:
        member = self._members[member_id]
        return (self._nodes[member.start].position, self._nodes[member.end].position)

    def clear_results(self) -> None:
        """Reset solved forces, areas and displacements."""
        for member in self._members.values():
            member.reset_state()
        for node in self._nodes.values():
            node.displacement = ZERO

    def __repr__(self) -> str:
        return f"Graph(nodes={self.node_count}, members={self.member_count})"
