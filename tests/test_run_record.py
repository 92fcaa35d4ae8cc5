"""Test suite for run records and the run record context."""

import json

import pytest

from trussforge import GroundStructurePolicy, OptimizationSession, SessionSettings
from trussforge.errors import SolverFailure
from trussforge.run_context import run_record_context
from trussforge.run_record import RunRecord, RunStatus
from trussforge.solvers import BackendRegistry, SolveResult


class BrokenBackend:
    backend_name = "broken"
    backend_version = "0"

    def solve(self, lp):
        return SolveResult.failure("numerical trouble", 0.0, self.backend_name)


class TestRunRecord:
    """Test the record schema."""

    def test_defaults(self):
        record = RunRecord()
        assert record.status == RunStatus.PENDING
        assert len(record.run_id) == 36
        assert record.iterations == []

    def test_capture_session(self, bridge_problem):
        session = OptimizationSession()
        session.reset(bridge_problem)
        session.step()

        record = RunRecord()
        record.capture_session(session)

        assert record.volume == pytest.approx(4.0, abs=1e-4)
        assert len(record.iterations) == 1
        assert len(record.bars) == 5
        assert len(record.displacements) == 4
        assert record.problem.node_count == 4
        assert record.problem.potential_count is None
        assert record.log_lines() == session.log_lines()

    def test_roundtrip(self, tmp_path, bridge_problem):
        session = OptimizationSession()
        session.reset(bridge_problem)
        session.step()
        record = RunRecord(problem_file="bridge.json")
        record.capture_session(session)
        record.set_status(RunStatus.CONVERGED)

        path = tmp_path / "records" / "run.json"
        record.save_to_file(path)
        loaded = RunRecord.load_from_file(path)

        assert loaded.run_id == record.run_id
        assert loaded.status == RunStatus.CONVERGED
        assert loaded.iterations[0].volume == record.iterations[0].volume
        assert loaded.bars[0].colour == record.bars[0].colour
        assert json.loads(path.read_text())["problem_file"] == "bridge.json"


class TestRunRecordContext:
    """Test automatic status and saving."""

    def test_converged_run_saved(self, tmp_path, cantilever_problem):
        session = OptimizationSession(
            SessionSettings(policy=GroundStructurePolicy.MEMBER_ADDING)
        )
        with run_record_context(session, tmp_path, settings={"mode": "member-adding"}) as record:
            session.reset(cantilever_problem)
            session.run()

        assert record.status == RunStatus.CONVERGED
        assert record.execution_time_seconds >= 0
        saved = tmp_path / "records" / f"{record.run_id}_run_record.json"
        assert saved.exists()
        assert RunRecord.load_from_file(saved).problem.potential_count == 4

    def test_stopped_run(self, tmp_path, cantilever_problem):
        session = OptimizationSession(
            SessionSettings(policy=GroundStructurePolicy.MEMBER_ADDING)
        )
        with run_record_context(session, tmp_path) as record:
            session.reset(cantilever_problem)
            session.stop()
            session.run()

        assert record.status == RunStatus.STOPPED

    def test_failed_run_saved_and_reraised(self, tmp_path, bridge_problem):
        registry = BackendRegistry()
        registry.register_backend("broken", BrokenBackend())
        session = OptimizationSession(SessionSettings(backend="broken"), registry)

        with pytest.raises(SolverFailure):
            with run_record_context(session, tmp_path) as record:
                session.reset(bridge_problem)
                session.step()

        assert record.status == RunStatus.FAILED
        assert record.error_message == "numerical trouble"
        saved = tmp_path / "records" / f"{record.run_id}_run_record.json"
        assert RunRecord.load_from_file(saved).status == RunStatus.FAILED


def test_objective_saved_with_iterations(tmp_path, bridge_problem):
    session = OptimizationSession()
    session.reset(bridge_problem.model_copy(update={"joint_cost": 0.25}))
    session.step()
    record = RunRecord()
    record.capture_session(session)

    path = tmp_path / "run.json"
    record.save_to_file(path)
    loaded = RunRecord.load_from_file(path)

    assert loaded.iterations[0].objective == pytest.approx(
        session.log[0].objective
    )
    assert loaded.iterations[0].objective > loaded.iterations[0].volume
