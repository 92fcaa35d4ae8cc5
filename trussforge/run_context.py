"""Run Record context manager for automatic logging.

Wraps a command-line optimisation run so that the run record is always
populated from the session and saved, whether the run succeeds or fails.
"""

import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator, Optional

from loguru import logger

from .errors import SolverFailure
from .layout.session import OptimizationSession
from .run_record import RunRecord, RunStatus


@contextmanager
def run_record_context(
    session: OptimizationSession,
    output_dir: Path,
    problem_file: Optional[Path] = None,
    settings: Optional[Dict[str, Any]] = None,
) -> Generator[RunRecord, None, None]:
    """Context manager for automatic run record creation and saving.

    Args:
        session: Session whose results are captured on exit
        output_dir: Output directory for the run
        problem_file: Problem file the run was started from
        settings: Session settings to store with the record

    Yields:
        RunRecord: The run record instance
    """
    start_time = time.time()
    record = RunRecord(
        problem_file=str(problem_file) if problem_file else None,
        settings=settings or {},
    )
    logger.info(f"Started optimisation run {record.run_id}")

    try:
        yield record

        if session.converged:
            record.set_status(RunStatus.CONVERGED)
        else:
            record.set_status(RunStatus.STOPPED)
        logger.info(f"Run {record.run_id} finished: {record.status.value}")

    except SolverFailure as e:
        logger.error(f"Run {record.run_id} failed: {e.message}")
        record.set_status(RunStatus.FAILED, e.message)
        raise

    except Exception as e:
        logger.error(f"Run {record.run_id} failed: {e}")
        record.set_status(RunStatus.FAILED, str(e))
        raise

    finally:
        record.execution_time_seconds = time.time() - start_time
        record.capture_session(session)

        records_dir = output_dir / "records"
        records_dir.mkdir(parents=True, exist_ok=True)
        record_file = records_dir / f"{record.run_id}_run_record.json"
        record.save_to_file(record_file)
