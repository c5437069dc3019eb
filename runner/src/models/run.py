"""
Pipeline run and stage result models.
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum
import uuid

from runner.src.exceptions import InvalidTransition

# Sentinel exit codes for stages that never produced one
LAUNCH_FAILURE_EXIT_CODE = 127
CHECKOUT_FAILURE_EXIT_CODE = 128

class RunStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

class FailureKind(str, Enum):
    CHECKOUT_FAILURE = "checkout_failure"
    LAUNCH_FAILURE = "launch_failure"
    NON_ZERO_EXIT = "non_zero_exit"

class PipelineResult(BaseModel):
    stage_name: str
    exit_code: int
    duration_millis: int
    failure: Optional[FailureKind] = None
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    class Config:
        frozen = True

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    @property
    def status(self) -> RunStatus:
        return RunStatus.SUCCEEDED if self.succeeded else RunStatus.FAILED

class PipelineRun(BaseModel):
    """
    Append-only record of one pass over a pipeline's stages.

    Moves pending -> running -> succeeded/failed. Once a failing result
    has been recorded nothing more can be appended.
    """
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    pipeline_name: str = "Unnamed Pipeline"
    workspace: str
    status: RunStatus = RunStatus.PENDING
    results: List[PipelineResult] = []
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def success(self) -> bool:
        return all(result.succeeded for result in self.results)

    @property
    def failed_result(self) -> Optional[PipelineResult]:
        for result in self.results:
            if not result.succeeded:
                return result
        return None

    @property
    def exit_code(self) -> int:
        """0 on success, otherwise the exit code of the first failing stage."""
        failed = self.failed_result
        return failed.exit_code if failed else 0

    @property
    def is_finished(self) -> bool:
        return self.status in (RunStatus.SUCCEEDED, RunStatus.FAILED)

    def start(self):
        if self.status != RunStatus.PENDING:
            raise InvalidTransition(f"Cannot start run {self.id} in state {self.status.value}")
        self.status = RunStatus.RUNNING
        self.started_at = datetime.utcnow()

    def record(self, result: PipelineResult):
        if self.status != RunStatus.RUNNING:
            raise InvalidTransition(f"Cannot record a result on run {self.id} in state {self.status.value}")
        if self.failed_result is not None:
            raise InvalidTransition(
                f"Run {self.id} already halted at stage '{self.failed_result.stage_name}'"
            )
        self.results.append(result)

    def finish(self):
        if self.status != RunStatus.RUNNING:
            raise InvalidTransition(f"Cannot finish run {self.id} in state {self.status.value}")
        self.status = RunStatus.SUCCEEDED if self.success else RunStatus.FAILED
        self.finished_at = datetime.utcnow()

    def abort(self):
        """Mark a run failed when it was interrupted before finishing."""
        if self.is_finished:
            raise InvalidTransition(f"Cannot abort run {self.id} in state {self.status.value}")
        self.status = RunStatus.FAILED
        self.finished_at = datetime.utcnow()
