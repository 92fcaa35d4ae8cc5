"""Graph model shared by the builder, formulator and session."""

from .graph import Graph, Node, Member, Vector3, Fixity, Colour
from .pool import PotentialConnectionPool

__all__ = [
    "Graph",
    "Node",
    "Member",
    "Vector3",
    "Fixity",
    "Colour",
    "PotentialConnectionPool",
]
