from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select, func
from typing import List, Optional

from api.src.db.database import get_db
from api.src.models.run import PipelineRunResponse
from runner.src.models.db import PipelineRunRecord, StageResultRecord

router = APIRouter(prefix="/runs", tags=["runs"])

@router.get("", response_model=List[PipelineRunResponse])
def list_runs(
    limit: int = 20,
    offset: int = 0,
    status: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """List recorded pipeline runs, newest first."""
    query = (
        select(PipelineRunRecord)
        .options(selectinload(PipelineRunRecord.results))
        .order_by(PipelineRunRecord.started_at.desc())
    )

    if status:
        query = query.where(PipelineRunRecord.status == status)

    query = query.limit(limit).offset(offset)

    return db.execute(query).scalars().all()

@router.get("/{run_id}", response_model=PipelineRunResponse)
def get_run(run_id: str, db: Session = Depends(get_db)):
    """Get a specific pipeline run."""
    query = (
        select(PipelineRunRecord)
        .options(selectinload(PipelineRunRecord.results))
        .where(PipelineRunRecord.id == run_id)
    )
    run = db.execute(query).scalar_one_or_none()

    if not run:
        raise HTTPException(status_code=404, detail="Pipeline run not found")

    return run

@router.get("/{run_id}/results")
def get_run_results(run_id: str, db: Session = Depends(get_db)):
    """Get the stage results of a run in execution order."""
    run = db.get(PipelineRunRecord, run_id)
    if not run:
        raise HTTPException(status_code=404, detail="Pipeline run not found")

    query = (
        select(StageResultRecord)
        .where(StageResultRecord.run_id == run_id)
        .order_by(StageResultRecord.stage_order)
    )
    results = db.execute(query).scalars().all()

    return {
        "run_id": run_id,
        "status": run.status,
        "stages_run": len(results),
        "stage_count": run.stage_count,
        "results": [
            {
                "name": result.stage_name,
                "status": result.status,
                "exit_code": result.exit_code,
                "duration_millis": result.duration_millis,
                "failure": result.failure,
            }
            for result in results
        ]
    }

stats_router = APIRouter(tags=["runs"])

@stats_router.get("/stats")
def get_run_stats(db: Session = Depends(get_db)):
    """Count runs by status and failures by kind."""
    status_query = (
        select(PipelineRunRecord.status, func.count(PipelineRunRecord.id))
        .group_by(PipelineRunRecord.status)
    )
    status_counts = {row[0]: row[1] for row in db.execute(status_query).all()}

    failure_query = (
        select(StageResultRecord.failure, func.count(StageResultRecord.id))
        .where(StageResultRecord.failure.is_not(None))
        .group_by(StageResultRecord.failure)
    )
    failure_counts = {row[0]: row[1] for row in db.execute(failure_query).all()}

    return {
        "runs": status_counts,
        "total_runs": sum(status_counts.values()),
        "failures": failure_counts,
    }
