"""Test suite for the member-adding step."""

import pytest

from trussforge.generator import ProblemParameters
from trussforge.generator.ground_structure import default_potentials
from trussforge.layout import MemberAdder, select_violations, virtual_strains
from trussforge.model import Graph


@pytest.fixture
def line():
    """Three collinear nodes, the first two already joined."""
    graph = Graph()
    for x in (0, 1, 2):
        graph.add_node((x, 0, 0))
    graph.add_member(0, 1)
    return graph


@pytest.fixture
def pool(line):
    return default_potentials(line)


def displaced(u2):
    return {0: (0.0, 0.0, 0.0), 1: (0.0, 0.0, 0.0), 2: u2}


class TestVirtualStrains:
    """Test normalised virtual strains of candidates."""

    def test_tension(self, pool):
        strains = virtual_strains(
            pool, displaced((0.5, 0.0, 0.0)), ProblemParameters(tensile_capacity=10.0)
        )
        # Candidates: 0-2 (length 2) and 1-2 (length 1)
        assert strains == pytest.approx({0: 2.5, 1: 5.0})

    def test_compression_uses_compressive_capacity(self, pool):
        params = ProblemParameters(tensile_capacity=10.0, compressive_capacity=4.0)
        strains = virtual_strains(pool, displaced((-0.5, 0.0, 0.0)), params)
        assert strains == pytest.approx({0: 1.0, 1: 2.0})

    def test_joint_cost_dilutes_strain(self, pool):
        params = ProblemParameters(tensile_capacity=10.0, joint_cost=1.0)
        strains = virtual_strains(pool, displaced((0.5, 0.0, 0.0)), params)
        assert strains == pytest.approx({0: 5.0 / 3.0, 1: 2.5})

    def test_transverse_motion_is_unstrained(self, pool):
        strains = virtual_strains(pool, displaced((0.0, 3.0, 0.0)), ProblemParameters())
        assert strains == pytest.approx({0: 0.0, 1: 0.0})

    def test_empty_pool(self, line, pool):
        pool.promote(line, pool.candidates())
        assert virtual_strains(pool, displaced((1.0, 0.0, 0.0)), ProblemParameters()) == {}


class TestSelectViolations:
    """Test the promotion rule."""

    def test_threshold_is_strict(self):
        strains = {0: 1.1, 1: 1.2, 2: 0.5}
        assert select_violations(strains, 0.1) == [1]

    @pytest.mark.parametrize("threshold", [0.0, 0.1, 0.2, 0.25, 0.3])
    def test_strain_on_limit_not_selected(self, threshold):
        strains = {0: 1.0 + threshold, 1: 1.0 + threshold + 1e-9}
        assert select_violations(strains, threshold) == [1]

    def test_most_violated_first(self):
        strains = {0: 1.5, 1: 3.0, 2: 2.0}
        assert select_violations(strains, 0.1) == [1, 2, 0]

    def test_cap(self):
        strains = {0: 1.5, 1: 3.0, 2: 2.0}
        assert select_violations(strains, 0.1, max_members=2) == [1, 2]
        assert select_violations(strains, 0.1, max_members=0) == [1, 2, 0]


class TestMemberAdder:
    """Test evaluate and grow."""

    def test_defaults_from_config(self):
        adder = MemberAdder()
        assert adder.threshold == 0.1
        assert adder.max_members_added == 0

    def test_negative_settings_rejected(self):
        with pytest.raises(ValueError):
            MemberAdder(threshold=-0.5)
        with pytest.raises(ValueError):
            MemberAdder(max_members_added=-1)

    def test_grow_promotes_once(self, line, pool):
        adder = MemberAdder()
        u = displaced((0.5, 0.0, 0.0))
        params = ProblemParameters(tensile_capacity=10.0)

        marked = adder.evaluate(pool, u, params)
        added = adder.grow(line, pool, marked)

        assert len(added) == 2
        assert line.member_count == 3
        assert adder.evaluate(pool, u, params) == []
        assert adder.grow(line, pool, marked) == []
        assert line.member_count == 3
