"""
Record pipeline run and stage status to the database.
"""

import logging
from datetime import datetime
from typing import Optional
from sqlalchemy import create_engine, update
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from runner.src.config import get_settings
from runner.src.models.db import Base, PipelineRunRecord, StageResultRecord
from runner.src.models.run import PipelineResult, PipelineRun

logger = logging.getLogger(__name__)

def build_engine(database_url: str) -> Engine:
    """Create an engine, allowing SQLite connections to cross threads."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args)

class StatusReporter:
    def __init__(self, database_url: Optional[str] = None, engine: Optional[Engine] = None):
        if engine is None:
            engine = build_engine(database_url or get_settings().database_url)
        self.engine = engine
        self.SessionLocal = sessionmaker(bind=engine)
        Base.metadata.create_all(engine)

    def run_started(self, run: PipelineRun, stage_count: int):
        """Insert a run as it starts."""
        with self.SessionLocal() as session:
            session.add(PipelineRunRecord(
                id=run.id,
                pipeline_name=run.pipeline_name,
                workspace=run.workspace,
                status=run.status.value,
                stage_count=stage_count,
                started_at=run.started_at,
            ))
            session.commit()
        logger.info(f"Recorded run {run.id} as {run.status.value}")

    def stage_finished(self, run: PipelineRun, stage_order: int, result: PipelineResult):
        """Append one stage result to a recorded run."""
        with self.SessionLocal() as session:
            session.add(StageResultRecord(
                run_id=run.id,
                stage_order=stage_order,
                stage_name=result.stage_name,
                status=result.status.value,
                exit_code=result.exit_code,
                duration_millis=result.duration_millis,
                failure=result.failure.value if result.failure else None,
                error=result.error,
                started_at=result.started_at,
                finished_at=result.finished_at,
            ))
            session.commit()
        logger.debug(f"Recorded stage {stage_order} of run {run.id} as {result.status.value}")

    def run_finished(self, run: PipelineRun):
        """Update final run status."""
        with self.SessionLocal() as session:
            session.execute(
                update(PipelineRunRecord)
                .where(PipelineRunRecord.id == run.id)
                .values(
                    status=run.status.value,
                    exit_code=run.exit_code,
                    finished_at=run.finished_at,
                    updated_at=datetime.utcnow(),
                )
            )
            session.commit()
        logger.info(f"Updated run {run.id} status to {run.status.value}")

