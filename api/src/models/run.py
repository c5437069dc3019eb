from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime

class StageResultResponse(BaseModel):
    stage_order: int
    stage_name: str
    status: str
    exit_code: int
    duration_millis: int
    failure: Optional[str] = None
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class PipelineRunBase(BaseModel):
    pipeline_name: str
    workspace: str

class PipelineRunResponse(PipelineRunBase):
    id: str
    status: str
    exit_code: Optional[int] = None
    stage_count: int
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    results: List[StageResultResponse] = []

    class Config:
        from_attributes = True
