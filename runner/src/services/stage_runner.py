"""
Stage runner - executes pipeline stages in order, stopping at the first failure.
"""

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

from runner.src.exceptions import CheckoutFailure, LaunchFailure
from runner.src.models.run import (
    CHECKOUT_FAILURE_EXIT_CODE,
    LAUNCH_FAILURE_EXIT_CODE,
    FailureKind,
    PipelineResult,
    PipelineRun,
)
from runner.src.models.stage import CheckoutStage, PipelineDefinition, Stage
from runner.src.services.checkout import GitCheckout
from runner.src.services.executor import run_command
from runner.src.services.status_reporter import StatusReporter

logger = logging.getLogger(__name__)
stage_logger = logging.getLogger("runner.stage")

def log_stage_output(stage_name: str, line: str):
    stage_logger.info(f"[{stage_name}] {line}")

class StageRunner:
    """
    Runs a fixed list of stages against one workspace.

    Each stage's exit code is recorded as a PipelineResult. The first
    non-zero exit ends the run; later stages are never started. Launch
    and checkout failures are recorded with sentinel exit codes.
    """

    def __init__(
        self,
        checkout_provider=None,
        reporter: Optional[StatusReporter] = None,
        sink: Optional[Callable[[str, str], None]] = None,
    ):
        self.checkout_provider = checkout_provider or GitCheckout()
        self.reporter = reporter
        self.sink = sink or log_stage_output

    def run_pipeline(self, definition: PipelineDefinition, workspace: Union[str, Path]) -> PipelineRun:
        return self.run(definition.stages, workspace, pipeline_name=definition.name)

    def run(
        self,
        stages: Sequence[Stage],
        workspace: Union[str, Path],
        pipeline_name: str = "Unnamed Pipeline",
    ) -> PipelineRun:
        workspace = Path(workspace)
        run = PipelineRun(pipeline_name=pipeline_name, workspace=str(workspace))

        logger.info(f"Starting pipeline run {run.id} ({pipeline_name}) with {len(stages)} stages")
        run.start()
        if self.reporter:
            self.reporter.run_started(run, len(stages))

        try:
            self._run_stages(run, stages, workspace)
        except BaseException:
            logger.exception(f"Pipeline run {run.id} was interrupted")
            if not run.is_finished:
                run.abort()
                if self.reporter:
                    self.reporter.run_finished(run)
            raise

        run.finish()
        if self.reporter:
            self.reporter.run_finished(run)

        logger.info(f"Pipeline run {run.id} finished with status: {run.status.value}")
        return run

    def _run_stages(self, run: PipelineRun, stages: Sequence[Stage], workspace: Path):
        for i, stage in enumerate(stages):
            logger.info(f"Executing stage {i}: {stage.name}")

            result = self.execute_stage(stage, workspace)
            run.record(result)
            if self.reporter:
                self.reporter.stage_finished(run, i, result)

            if result.succeeded:
                logger.info(f"Stage {i} ({stage.name}) succeeded in {result.duration_millis}ms")
            else:
                logger.error(
                    f"Stage {i} ({stage.name}) failed with exit code {result.exit_code}"
                    f" ({result.failure.value})"
                )
                skipped = len(stages) - i - 1
                if skipped:
                    logger.info(f"Not running {skipped} remaining stage(s)")
                break  # Stop on first failure

    def execute_stage(self, stage: Stage, workspace: Path) -> PipelineResult:
        """Execute a single stage and time it."""
        started_at = datetime.utcnow()
        start = time.monotonic()
        failure = None
        error = None

        try:
            if isinstance(stage, CheckoutStage):
                self.checkout_provider.checkout(stage, workspace)
                exit_code = 0
            else:
                exit_code = run_command(
                    stage.command,
                    stage.arguments,
                    workspace,
                    env=stage.env,
                    sink=lambda line: self.sink(stage.name, line),
                )
        except CheckoutFailure as e:
            logger.error(f"Checkout for stage '{stage.name}' failed: {e}")
            exit_code = CHECKOUT_FAILURE_EXIT_CODE
            failure = FailureKind.CHECKOUT_FAILURE
            error = str(e)
        except LaunchFailure as e:
            logger.error(f"Stage '{stage.name}' could not be launched: {e}")
            exit_code = LAUNCH_FAILURE_EXIT_CODE
            failure = FailureKind.LAUNCH_FAILURE
            error = str(e)
        else:
            if exit_code != 0:
                failure = FailureKind.NON_ZERO_EXIT
                error = f"{stage.describe()} exited with status {exit_code}"

        duration_millis = int((time.monotonic() - start) * 1000)

        return PipelineResult(
            stage_name=stage.name,
            exit_code=exit_code,
            duration_millis=duration_millis,
            failure=failure,
            error=error,
            started_at=started_at,
            finished_at=datetime.utcnow(),
        )
