"""
Errors raised while loading and running a pipeline.
"""

from typing import List, Optional

class PipelineError(Exception):
    """Base class for stage runner errors."""
    pass

class PipelineConfigError(PipelineError):
    """Raised when pipeline configuration is invalid."""
    pass

class ExecutionFailure(PipelineError):
    """Raised when a stage command cannot be executed."""
    pass

class LaunchFailure(ExecutionFailure):
    """Raised when the process for a command could not be started at all."""

    def __init__(self, command: str, arguments: Optional[List[str]] = None, reason: str = ""):
        self.command = command
        self.arguments = list(arguments or [])
        self.reason = reason
        super().__init__(f"Failed to launch '{command}': {reason}")

class CheckoutFailure(PipelineError):
    """Raised when the workspace could not be populated."""
    pass

class InvalidTransition(PipelineError):
    """Raised on an illegal pipeline run state change."""
    pass
