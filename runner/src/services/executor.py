"""
Command executor - runs one external command inside the workspace.
"""

import logging
import os
import shlex
import subprocess
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence, Union

from runner.src.exceptions import LaunchFailure

logger = logging.getLogger(__name__)

def run_command(
    command: str,
    arguments: Sequence[str],
    workdir: Union[str, Path],
    env: Optional[Mapping[str, str]] = None,
    sink: Optional[Callable[[str], None]] = None,
) -> int:
    """
    Run a command to completion and return its exit code.

    Stdout and stderr are merged and each line is handed to `sink` as soon
    as it is read. Raises LaunchFailure if the process cannot be started;
    a process that starts and exits non-zero is reported by its exit code.
    """
    sink = sink or logger.info
    argv = [command] + list(arguments)

    process_env = os.environ.copy()
    if env:
        process_env.update(env)

    logger.debug(f"Launching {shlex.join(argv)} in {workdir}")

    try:
        process = subprocess.Popen(
            argv,
            cwd=str(workdir),
            env=process_env,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            bufsize=1,
        )
    except OSError as e:
        raise LaunchFailure(command, arguments, e.strerror or str(e)) from e

    with process:
        for line in process.stdout:
            sink(line.rstrip("\n"))
        exit_code = process.wait()

    logger.debug(f"{command} exited with status {exit_code}")
    return exit_code
