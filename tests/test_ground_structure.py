"""Test suite for problem loading and ground-structure construction."""

import json

import pytest
import yaml
from pydantic import ValidationError

from trussforge.errors import DimensionMismatch, InvalidTopology
from trussforge.generator import (
    GroundStructurePolicy,
    PotentialStructure,
    ProblemParameters,
    TrussProblem,
    build_ground_structure,
    load_problem,
)


@pytest.fixture
def pentagon_raw():
    """Five free nodes, one member, no boundary conditions yet."""
    return {
        "nodes": [[0, 0, 0], [1, 0, 0], [2, 0, 0], [0, 1, 0], [1, 1, 0]],
        "members": [[0, 1]],
        "fixities": [[True, True, True]] + [[False, False, True]] * 4,
        "loads": [[0, 0, 0]] * 4 + [[0, -1, 0]],
    }


class TestProblem:
    """Test problem validation and file loading."""

    def test_parameters(self, pentagon_raw):
        problem = TrussProblem(**pentagon_raw, tensile_capacity=2.0, joint_cost=0.5)
        params = problem.parameters

        assert params.tensile_capacity == 2.0
        assert params.compressive_capacity == 1.0
        assert params.capacity(1.0) == 2.0
        assert params.capacity(-1.0) == 1.0

    def test_non_positive_capacity_rejected(self, pentagon_raw):
        with pytest.raises(ValidationError):
            TrussProblem(**pentagon_raw, compressive_capacity=0.0)
        with pytest.raises(ValueError):
            ProblemParameters(tensile_capacity=-1.0)

    def test_load_json(self, tmp_path, pentagon_raw):
        path = tmp_path / "problem.json"
        path.write_text(json.dumps(pentagon_raw))

        problem = load_problem(path)
        assert len(problem.nodes) == 5
        assert problem.fixities[0] == (True, True, True)

    def test_load_yaml(self, tmp_path, pentagon_raw):
        path = tmp_path / "problem.yaml"
        path.write_text(yaml.safe_dump(pentagon_raw))

        problem = load_problem(path)
        assert problem.members == [(0, 1)]
        assert problem.loads[4] == (0.0, -1.0, 0.0)


class TestGroundStructure:
    """Test the three construction policies."""

    def test_existing_topology_copied(self, bridge_problem):
        graph, pool = build_ground_structure(bridge_problem)

        assert pool is None
        assert graph.node_count == 4
        assert [m.endpoints for m in graph.members] == bridge_problem.members
        assert graph.node(1).load == (0.0, -1.0, 0.0)
        assert graph.node(2).fixity == (False, True, True)

    def test_fully_connected_count(self, pentagon_raw):
        problem = TrussProblem(**pentagon_raw)
        graph, pool = build_ground_structure(
            problem, GroundStructurePolicy.FULLY_CONNECTED
        )

        assert pool is None
        assert graph.member_count == 5 * 4 // 2
        for member in graph.members:
            assert member.start < member.end

    def test_member_adding_default_pool(self, pentagon_raw):
        problem = TrussProblem(**pentagon_raw)
        graph, pool = build_ground_structure(
            problem, GroundStructurePolicy.MEMBER_ADDING
        )

        assert graph.member_count == 1
        assert len(pool) == 10 - 1
        for candidate in pool.candidates():
            a, b = pool.main_endpoints(candidate)
            assert not graph.has_member_between(a, b)

    def test_member_adding_supplied_pool(self, bridge_problem):
        problem = bridge_problem.model_copy(
            update={
                "potentials": PotentialStructure(
                    nodes=[(2, 0, 0), (0, 0, 0)], members=[(0, 1)]
                )
            }
        )
        graph, pool = build_ground_structure(
            problem, GroundStructurePolicy.MEMBER_ADDING
        )

        assert len(pool) == 1
        assert pool.main_endpoints(0) == (2, 0)

    def test_unmatched_potential_node(self, bridge_problem):
        problem = bridge_problem.model_copy(
            update={"potentials": PotentialStructure(nodes=[(5, 5, 5)], members=[])}
        )
        with pytest.raises(InvalidTopology):
            build_ground_structure(problem, GroundStructurePolicy.MEMBER_ADDING)

    def test_fixity_dimension_mismatch(self, pentagon_raw):
        pentagon_raw["fixities"] = pentagon_raw["fixities"][:4]
        problem = TrussProblem(**pentagon_raw)

        with pytest.raises(DimensionMismatch) as excinfo:
            build_ground_structure(problem)
        assert excinfo.value.name == "Fixity"
        assert excinfo.value.expected == 5
        assert excinfo.value.actual == 4

    def test_load_dimension_mismatch(self, pentagon_raw):
        pentagon_raw["loads"] = pentagon_raw["loads"] + [[0, 0, 0]]
        problem = TrussProblem(**pentagon_raw)

        with pytest.raises(DimensionMismatch, match="Load"):
            build_ground_structure(problem)

    def test_member_index_out_of_range(self, pentagon_raw):
        pentagon_raw["members"] = [[0, 5]]
        with pytest.raises(InvalidTopology):
            build_ground_structure(TrussProblem(**pentagon_raw))

    def test_policy_from_cli_value(self):
        assert GroundStructurePolicy("member-adding") is GroundStructurePolicy.MEMBER_ADDING
