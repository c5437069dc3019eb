"""
Checkout provider - populates the workspace from version control.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from runner.src.config import get_settings
from runner.src.exceptions import CheckoutFailure
from runner.src.models.stage import CheckoutStage

logger = logging.getLogger(__name__)

class GitCheckout:
    """
    Clone or update a git repository into the workspace.

    A stage without a repository leaves the workspace untouched and only
    requires it to exist.
    """

    def __init__(self, timeout: Optional[int] = None, depth: Optional[int] = None):
        settings = get_settings()
        self.timeout = timeout if timeout is not None else settings.checkout_timeout
        self.depth = depth if depth is not None else settings.checkout_depth

    def checkout(self, stage: CheckoutStage, workspace: Path):
        workspace = Path(workspace)

        if not stage.repository:
            if not workspace.is_dir():
                raise CheckoutFailure(f"Workspace {workspace} does not exist")
            logger.info(f"Using existing workspace {workspace}")
            return

        if (workspace / ".git").is_dir():
            # Reuse the existing clone
            logger.info(f"Updating existing checkout in {workspace}")
            self._fetch(workspace, stage.repository, stage.ref or "HEAD")
            return

        if workspace.exists() and any(workspace.iterdir()):
            raise CheckoutFailure(f"Workspace {workspace} is not empty and is not a git checkout")

        workspace.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Cloning {stage.repository} into {workspace}")
        self._git(["clone", "--depth", str(self.depth), stage.repository, str(workspace)])

        if stage.ref:
            self._fetch(workspace, stage.repository, stage.ref)

    def _fetch(self, workspace: Path, repository: str, ref: str):
        # Always from the stage repository, never the clone's origin
        logger.info(f"Checking out {repository}@{ref}")
        self._git(["fetch", "--depth", str(self.depth), repository, ref], cwd=workspace)
        self._git(["checkout", "--force", "FETCH_HEAD"], cwd=workspace)

    def _git(self, args: List[str], cwd: Optional[Path] = None):
        try:
            subprocess.run(
                ["git"] + args,
                cwd=str(cwd) if cwd else None,
                check=True,
                capture_output=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise CheckoutFailure("git executable not found")
        except subprocess.TimeoutExpired:
            raise CheckoutFailure(f"git {args[0]} timed out after {self.timeout}s")
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode(errors="replace").strip() if e.stderr else ""
            raise CheckoutFailure(f"git {args[0]} failed: {stderr}")
