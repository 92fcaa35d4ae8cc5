"""Result and visualisation state derived from a solved layout LP.

Writes forces, areas, radii and colours onto graph members and virtual
displacements onto nodes, and extracts the geometry handed to a display
collaborator.
"""

import math
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional

from loguru import logger

from ..config.optimizer_config import config
from ..generator.problem import ProblemParameters
from ..model.graph import GREY, Colour, Graph, Vector3
from .formulation import LinearProgram, recover_displacements, recover_member_forces

PALE = 220  # Channel value of the faintest stressed bar


@dataclass
class BarSegment:
    """A stressed member as a line segment for display."""

    member_id: int
    start: Vector3
    end: Vector3
    force: float
    area: float
    radius: float
    colour: Colour
    line_weight: int

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


def radius_from_area(area: float) -> float:
    """Radius of a solid circular section with the given area."""
    return math.sqrt(max(area, 0.0) / math.pi)


def member_colour(force: float, area: float, max_area: float) -> Colour:
    """Blue for tension, red for compression, stronger for larger areas."""
    if area <= 0.0 or max_area <= 0.0:
        return GREY
    fade = int(round(PALE * (1.0 - min(area / max_area, 1.0))))
    if force >= 0:
        return (fade, fade, 255)
    return (255, fade, fade)


def line_weight(radius: float) -> int:
    """Display thickness in pixels; stressed bars are at least 1px wide."""
    weight = int(math.floor(radius * config.display.LINE_WEIGHT_SCALE)) + 1
    return max(weight, config.display.MIN_LINE_WEIGHT)


def apply_solution(
    graph: Graph,
    lp: LinearProgram,
    x,
    duals,
    parameters: ProblemParameters,
    zero_tol: Optional[float] = None,
) -> float:
    """Write a solution onto the graph and return the structural volume.

    Members whose area falls below ``zero_tol`` are recorded with zero force
    and area and count as absent.
    """
    if zero_tol is None:
        zero_tol = config.tolerances.ZERO_AREA_TOL

    forces = recover_member_forces(lp, x)
    areas = {}
    for member_id, force in forces.items():
        area = abs(force) / parameters.capacity(force)
        if area < zero_tol:
            forces[member_id] = 0.0
            area = 0.0
        areas[member_id] = area

    max_area = max(areas.values(), default=0.0)
    for member_id, force in forces.items():
        member = graph.member(member_id)
        member.force = force
        member.area = areas[member_id]
        member.radius = radius_from_area(member.area)
        member.colour = member_colour(force, member.area, max_area)

    for node_id, displacement in recover_displacements(lp, duals).items():
        graph.node(node_id).displacement = displacement

    volume = structural_volume(graph)
    logger.debug(
        f"Applied solution: {active_member_count(graph)} active members, "
        f"volume {volume:.6f}"
    )
    return volume


def structural_volume(graph: Graph) -> float:
    """Sum of length times area over all members."""
    return sum(m.length * m.area for m in graph.members)


def active_member_count(graph: Graph) -> int:
    return sum(1 for m in graph.members if m.area > 0.0)


def active_bars(graph: Graph, radius_tol: Optional[float] = None) -> List[BarSegment]:
    """Stressed members as segments; bars at or below ``radius_tol`` are inert."""
    if radius_tol is None:
        radius_tol = config.tolerances.RADIUS_TOL

    bars = []
    for member in graph.members:
        if member.radius <= radius_tol:
            continue
        start, end = graph.segment(member.id)
        bars.append(
            BarSegment(
                member_id=member.id,
                start=start,
                end=end,
                force=member.force,
                area=member.area,
                radius=member.radius,
                colour=member.colour,
                line_weight=line_weight(member.radius),
            )
        )
    return bars


def node_displacements(graph: Graph) -> List[Vector3]:
    """Displacement of every node in insertion order."""
    return [node.displacement for node in graph.nodes]
