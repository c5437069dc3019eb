from api.src.models.run import (
    PipelineRunResponse,
    StageResultResponse,
)

__all__ = [
    "PipelineRunResponse",
    "StageResultResponse",
]
