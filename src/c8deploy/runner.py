"""Command execution for package manager and container runtime calls."""

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

from .errors import CommandError

logger = logging.getLogger("c8deploy.runner")


class CommandRunner:
    """Run external commands and report failures as CommandError."""

    def __init__(self, timeout: Optional[float] = None, use_sudo: Optional[bool] = None):
        self.timeout = timeout
        if use_sudo is None:
            use_sudo = hasattr(os, "geteuid") and os.geteuid() != 0
        self.use_sudo = use_sudo

    def run(
        self,
        cmd: List[str],
        cwd: Optional[Path] = None,
        env: Optional[Dict[str, str]] = None,
        input: Optional[str] = None,
        check: bool = True,
    ) -> subprocess.CompletedProcess:
        """Run a command and return the result."""
        logger.debug("Running: %s", " ".join(cmd))

        run_env = None
        if env:
            run_env = os.environ.copy()
            run_env.update(env)

        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                env=run_env,
                input=input,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError:
            raise CommandError(cmd)
        except subprocess.TimeoutExpired:
            raise CommandError(cmd, stderr=f"timed out after {self.timeout}s")

        if result.stdout:
            logger.debug(result.stdout.rstrip())
        if result.stderr:
            logger.debug(result.stderr.rstrip())

        if check and result.returncode != 0:
            raise CommandError(cmd, result.returncode, result.stderr)

        return result

    def sudo(self, cmd: List[str], **kwargs) -> subprocess.CompletedProcess:
        """Run a privileged command, prefixing sudo when not root."""
        if self.use_sudo:
            # sudo resets the environment; pass variables as VAR=value arguments
            env = kwargs.pop("env", None) or {}
            cmd = ["sudo"] + [f"{key}={value}" for key, value in env.items()] + cmd
        return self.run(cmd, **kwargs)

    def succeeds(self, cmd: List[str], cwd: Optional[Path] = None) -> bool:
        """Return True if the command runs and exits 0."""
        try:
            return self.run(cmd, cwd=cwd, check=False).returncode == 0
        except CommandError:
            return False

    def which(self, tool: str) -> Optional[str]:
        return shutil.which(tool)
