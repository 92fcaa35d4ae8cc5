"""Shared problems for the trussforge test suite."""

import itertools

import pytest

from trussforge.generator.problem import TrussProblem

PINNED = (True, True, True)
PLANAR = (False, False, True)  # Free in x and y only
ROLLER = (False, True, True)


@pytest.fixture
def bridge_problem():
    """Statically determinate four-node truss with a known optimum.

    A(0,0) pinned, B(1,0) loaded downwards, C(2,0) on a roller, D(1,1) above B.
    Forces: AB = BC = 0.5, BD = 1 (tension), AD = CD = -sqrt(2)/2. Volume 4.
    """
    return TrussProblem(
        nodes=[(0, 0, 0), (1, 0, 0), (2, 0, 0), (1, 1, 0)],
        members=[(0, 1), (1, 2), (0, 3), (2, 3), (1, 3)],
        fixities=[PINNED, PLANAR, ROLLER, PLANAR],
        loads=[(0, 0, 0), (0, -1, 0), (0, 0, 0), (0, 0, 0)],
    )


@pytest.fixture
def cantilever_problem():
    """3x2 grid of nodes clamped on the left edge, loaded at the bottom right.

    Only the members inside each unit cell are supplied, so member adding has
    the four long diagonals and spans to discover.
    """
    nodes = [(x, y, 0) for y in (0, 1) for x in (0, 1, 2)]
    cells = [(0, 1, 3, 4), (1, 2, 4, 5)]
    members = sorted({pair for cell in cells for pair in itertools.combinations(cell, 2)})
    fixities = [PINNED if x == 0 else PLANAR for x, _, _ in nodes]
    loads = [(0, -1, 0) if (x, y) == (2, 0) else (0, 0, 0) for x, y, _ in nodes]
    return TrussProblem(nodes=nodes, members=members, fixities=fixities, loads=loads)
