from runner.src.models.stage import (
    StageKind,
    CheckoutStage,
    CommandStage,
    Stage,
    PipelineDefinition,
)
from runner.src.models.run import (
    RunStatus,
    FailureKind,
    PipelineResult,
    PipelineRun,
    LAUNCH_FAILURE_EXIT_CODE,
    CHECKOUT_FAILURE_EXIT_CODE,
)

__all__ = [
    "StageKind",
    "CheckoutStage",
    "CommandStage",
    "Stage",
    "PipelineDefinition",
    "RunStatus",
    "FailureKind",
    "PipelineResult",
    "PipelineRun",
    "LAUNCH_FAILURE_EXIT_CODE",
    "CHECKOUT_FAILURE_EXIT_CODE",
]
