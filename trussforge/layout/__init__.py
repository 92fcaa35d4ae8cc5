"""
Layout optimisation package.

Formulates the minimum-volume LP, grows the structure with the
member-adding method and derives the result geometry. The session that
drives these steps lives in ``trussforge.layout.session``.
"""

from .formulation import (
    LinearProgram,
    formulate,
    equilibrium_matrix,
    recover_member_forces,
    recover_displacements,
)
from .member_adding import MemberAdder, virtual_strains, select_violations
from .postprocessor import (
    BarSegment,
    apply_solution,
    active_bars,
    node_displacements,
    structural_volume,
    radius_from_area,
    member_colour,
    line_weight,
)

__all__ = [
    "LinearProgram",
    "formulate",
    "equilibrium_matrix",
    "recover_member_forces",
    "recover_displacements",
    "MemberAdder",
    "virtual_strains",
    "select_violations",
    "BarSegment",
    "apply_solution",
    "active_bars",
    "node_displacements",
    "structural_volume",
    "radius_from_area",
    "member_colour",
    "line_weight",
]
