"""Potential connection pool for the member-adding method."""

from typing import Dict, Iterable, List

from loguru import logger

from .graph import Graph


class PotentialConnectionPool:
    """Candidate members not yet part of the active structure.

    The pool owns its own graph, whose nodes sit at the same positions as the
    main graph's nodes but carry their own ids. ``node_map`` translates pool
    node ids into main-graph node ids for promotion.
    """

    def __init__(self, graph: Graph, node_map: Dict[int, int]):
        self.graph = graph
        self.node_map = dict(node_map)
        self.promoted: Dict[int, int] = {}  # pool member id -> main member id

    def __len__(self) -> int:
        return self.graph.member_count

    @property
    def remaining(self) -> int:
        return self.graph.member_count - len(self.promoted)

    def candidates(self) -> List[int]:
        """Pool member ids not yet promoted, in insertion order."""
        return [m for m in self.graph.member_ids if m not in self.promoted]

    def main_endpoints(self, pool_member_id: int):
        """Endpoints of a candidate expressed as main-graph node ids."""
        member = self.graph.member(pool_member_id)
        return self.node_map[member.start], self.node_map[member.end]

    def promote(self, target: Graph, pool_member_ids: Iterable[int]) -> List[int]:
        """Append candidates to ``target`` as new members with zero force.

        Candidates that were promoted earlier are skipped. Returns the ids of
        the members created in ``target``.
        """
        added = []
        for pool_member_id in pool_member_ids:
            if pool_member_id in self.promoted:
                logger.debug(f"Candidate {pool_member_id} already promoted, skipping")
                continue
            start, end = self.main_endpoints(pool_member_id)
            member_id = target.add_member(start, end)
            self.promoted[pool_member_id] = member_id
            added.append(member_id)
        return added
