"""Test suite for the equilibrium LP formulation."""

import math

import numpy as np
import pytest

from trussforge.generator import ProblemParameters, build_ground_structure
from trussforge.layout import (
    equilibrium_matrix,
    formulate,
    recover_displacements,
    recover_member_forces,
)
from trussforge.layout.formulation import free_rows
from trussforge.model import Graph


@pytest.fixture
def bridge_graph(bridge_problem):
    graph, _ = build_ground_structure(bridge_problem)
    return graph


class TestEquilibriumMatrix:
    """Test the node/member incidence of direction cosines."""

    def test_rows_only_for_free_axes(self, bridge_graph):
        rows = free_rows(bridge_graph)
        # A pinned, B free in x/y, C free in x, D free in x/y
        assert rows == [(1, 0), (1, 1), (2, 0), (3, 0), (3, 1)]

    def test_member_signs(self):
        graph = Graph()
        a = graph.add_node((0, 0, 0))
        b = graph.add_node((3, 4, 0), fixity=(False, False, True))
        graph.add_member(a, b)

        rows = free_rows(graph)
        C = equilibrium_matrix(graph, rows, graph.member_ids).toarray()

        assert C.shape == (5, 1)
        # Start node gets -e, end node +e
        np.testing.assert_allclose(C[:, 0], [-0.6, -0.8, 0.0, 0.6, 0.8])

    def test_sparse_structure(self, bridge_graph):
        lp = formulate(bridge_graph, ProblemParameters())

        assert lp.A_eq.shape == (5, 10)
        assert lp.n_variables == 10
        assert lp.n_constraints == 5
        np.testing.assert_allclose(
            lp.A_eq[:, 5:].toarray(), -lp.A_eq[:, :5].toarray()
        )


class TestFormulate:
    """Test objective, bounds and right-hand side."""

    def test_objective_uses_capacities(self, bridge_graph):
        params = ProblemParameters(tensile_capacity=2.0, compressive_capacity=4.0)
        lp = formulate(bridge_graph, params)

        lengths = [1.0, 1.0, math.sqrt(2), math.sqrt(2), 1.0]
        np.testing.assert_allclose(lp.c[:5], np.array(lengths) / 2.0)
        np.testing.assert_allclose(lp.c[5:], np.array(lengths) / 4.0)

    def test_joint_cost_lengthens_members(self, bridge_graph):
        lp = formulate(bridge_graph, ProblemParameters(joint_cost=0.25))
        np.testing.assert_allclose(lp.c[:5], lp.lengths + 0.25)

    def test_load_vector(self, bridge_graph):
        lp = formulate(bridge_graph, ProblemParameters())
        np.testing.assert_allclose(lp.b_eq, [0.0, -1.0, 0.0, 0.0, 0.0])

    def test_area_limit_bounds(self, bridge_graph):
        params = ProblemParameters(tensile_capacity=2.0, compressive_capacity=1.0)
        lp = formulate(bridge_graph, params, max_area=3.0)

        assert lp.bounds[0] == (0.0, 6.0)
        assert lp.bounds[5] == (0.0, 3.0)
        assert formulate(bridge_graph, params).bounds[0] == (0.0, None)

    def test_fully_fixed_structure_has_no_rows(self):
        graph = Graph()
        a = graph.add_node((0, 0, 0), fixity=(True, True, True))
        b = graph.add_node((1, 0, 0), fixity=(True, True, True))
        graph.add_member(a, b)

        lp = formulate(graph, ProblemParameters())
        assert lp.A_eq.shape == (0, 2)
        assert lp.b_eq.shape == (0,)


class TestRecovery:
    """Test mapping LP vectors back onto graph ids."""

    def test_forces_are_tension_minus_compression(self, bridge_graph):
        lp = formulate(bridge_graph, ProblemParameters())
        x = np.array([0.5, 0.0, 0.0, 0.0, 1.0, 0.0, 0.2, 0.7, 0.7, 0.0])

        forces = recover_member_forces(lp, x)
        assert forces == pytest.approx({0: 0.5, 1: -0.2, 2: -0.7, 3: -0.7, 4: 1.0})

    def test_fixed_axes_have_zero_displacement(self, bridge_graph):
        lp = formulate(bridge_graph, ProblemParameters())
        displacements = recover_displacements(lp, np.arange(1.0, 6.0))

        assert displacements[0] == (0.0, 0.0, 0.0)
        assert displacements[1] == (1.0, 2.0, 0.0)
        assert displacements[2] == (3.0, 0.0, 0.0)
        assert displacements[3] == (4.0, 5.0, 0.0)
