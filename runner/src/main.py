"""
Stage Runner - command line entry point.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from runner.src.config import get_settings
from runner.src.exceptions import PipelineConfigError
from runner.src.models.run import PipelineRun
from runner.src.models.stage import PipelineDefinition
from runner.src.services.pipeline_parser import find_pipeline_file, load_pipeline_file
from runner.src.services.stage_runner import StageRunner
from runner.src.services.status_reporter import StatusReporter

logger = logging.getLogger(__name__)

EXIT_CONFIG_ERROR = 2

def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

def load_definition(pipeline: Optional[str], workspace: Path) -> PipelineDefinition:
    pipeline_file = Path(pipeline) if pipeline else find_pipeline_file(workspace)
    if pipeline_file is None:
        raise PipelineConfigError(f"No pipeline file found in {workspace}")
    logger.info(f"Loading pipeline from {pipeline_file}")
    return load_pipeline_file(pipeline_file)

def print_summary(run: PipelineRun, stage_count: int):
    print("\n--- Pipeline Summary ---")
    for result in run.results:
        status = "OK" if result.succeeded else "FAILED"
        print(f"  {result.stage_name}: {status} (exit {result.exit_code}, {result.duration_millis}ms)")
        if result.error:
            print(f"    error: {result.error}")

    not_run = stage_count - len(run.results)
    if not_run:
        print(f"  ({not_run} stage(s) not run)")

    overall = "SUCCESS" if run.success else "FAILURE"
    print(f"\nResult: {overall}")

def cmd_run(args: argparse.Namespace) -> int:
    settings = get_settings()
    workspace = Path(args.workspace).resolve()

    try:
        definition = load_definition(args.pipeline, workspace)
    except PipelineConfigError as e:
        logger.error(f"Invalid pipeline configuration: {e}")
        return EXIT_CONFIG_ERROR

    reporter = None
    if args.record or settings.record_runs:
        reporter = StatusReporter()

    run = StageRunner(reporter=reporter).run_pipeline(definition, workspace)
    print_summary(run, len(definition.stages))

    exit_code = run.exit_code
    if exit_code < 0:
        # Killed by a signal
        return 128 - exit_code
    return exit_code

def cmd_validate(args: argparse.Namespace) -> int:
    try:
        definition = load_pipeline_file(args.pipeline)
    except PipelineConfigError as e:
        print(f"Invalid pipeline configuration: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    print(f"Pipeline: {definition.name}")
    for i, stage in enumerate(definition.stages):
        print(f"  {i}. {stage.name}: {stage.describe()}")
    return 0

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a fail-fast sequential build pipeline")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set logging level (overrides LOG_LEVEL env var)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a pipeline")
    run_parser.add_argument(
        "pipeline",
        nargs="?",
        help="Pipeline file (default: look for .pipeline.yml or pipeline.yml in the workspace)",
    )
    run_parser.add_argument(
        "--workspace",
        default=".",
        help="Directory every stage runs in.",
    )
    run_parser.add_argument(
        "--record",
        action="store_true",
        help="Record the run in the database (also enabled by RECORD_RUNS)",
    )
    run_parser.set_defaults(func=cmd_run)

    validate_parser = subparsers.add_parser("validate", help="Check a pipeline file and list its stages")
    validate_parser.add_argument("pipeline")
    validate_parser.set_defaults(func=cmd_validate)

    return parser

def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level or get_settings().log_level)
    return args.func(args)

if __name__ == "__main__":
    sys.exit(main())
