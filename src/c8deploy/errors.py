"""Exception hierarchy for c8deploy"""

from typing import List, Optional


class C8DeployError(Exception):
    """Base exception for installer and health errors"""

    pass


class ConfigError(C8DeployError):
    """Invalid configuration value"""

    pass


class PrerequisiteError(C8DeployError):
    """A required tool or component could not be installed"""

    pass


class MissingArtifactError(C8DeployError):
    """An expected file is absent"""

    pass


class DownloadError(C8DeployError):
    """Release archive download or extraction failed"""

    pass


class CommandError(C8DeployError):
    """External command failed or could not be started"""

    def __init__(self, cmd: List[str], returncode: Optional[int] = None, stderr: str = ""):
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = stderr
        if returncode is None:
            message = f"Command could not be run: {' '.join(self.cmd)}"
        else:
            message = f"Command failed with code {returncode}: {' '.join(self.cmd)}"
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)
