from runner.src.services.executor import run_command
from runner.src.services.checkout import GitCheckout
from runner.src.services.pipeline_parser import (
    parse_pipeline_config,
    parse_pipeline_dict,
    load_pipeline_file,
    find_pipeline_file,
)
from runner.src.services.stage_runner import StageRunner
from runner.src.services.status_reporter import StatusReporter, build_engine

__all__ = [
    "run_command",
    "GitCheckout",
    "parse_pipeline_config",
    "parse_pipeline_dict",
    "load_pipeline_file",
    "find_pipeline_file",
    "StageRunner",
    "StatusReporter",
    "build_engine",
]
