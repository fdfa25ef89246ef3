"""Version-control query capability and its git subprocess implementation."""

import shutil
import subprocess
from typing import NamedTuple, Optional, Protocol

from ..utils.rich_logger import get_logger
from .errors import EnvironmentSetupError, GitCommandError

logger = get_logger(__name__)

GIT_TIMEOUT = 60  # seconds; fetch can be slow


class Remote(NamedTuple):
    """One line of `git remote -v`."""
    name: str
    url: str
    direction: str  # "(fetch)" or "(push)"


class VersionControlQuery(Protocol):
    """What prq needs from the local version-control tool."""

    def remotes(self) -> list[Remote]:
        ...

    def config_get(self, key: str) -> Optional[str]:
        ...

    def config_set_global(self, key: str, value: str) -> None:
        ...

    def current_branch(self) -> Optional[str]:
        ...

    def branch_exists(self, branch: str) -> bool:
        ...

    def run(self, *args: str) -> str:
        ...


def parse_remotes(output: str) -> list[Remote]:
    """
    Parse `git remote -v` output.

    Args:
        output: Raw command output

    Returns:
        Remotes in output order; malformed lines are skipped
    """
    remotes = []
    for line in output.splitlines():
        parts = line.split()
        if len(parts) != 3:
            continue
        remotes.append(Remote(*parts))
    return remotes


class GitCommand:
    """VersionControlQuery that shells out to the git binary."""

    def __init__(self, binary: str = "git", cwd: Optional[str] = None, debug: bool = False):
        """
        Initialize GitCommand.

        Args:
            binary: git executable name or path
            cwd: Working directory for git invocations
            debug: Log every git invocation
        """
        self.binary = binary
        self.cwd = cwd
        self.debug = debug
        self._checked = False

    def _require_binary(self) -> None:
        if self._checked:
            return
        if shutil.which(self.binary) is None:
            raise EnvironmentSetupError(
                f"You need the program '{self.binary}' in your path to use this feature."
            )
        self._checked = True

    def _run(self, args: list[str]) -> subprocess.CompletedProcess:
        self._require_binary()
        if self.debug:
            logger.info("Running git", command=" ".join([self.binary, *args]))
        try:
            return subprocess.run(
                [self.binary, *args],
                capture_output=True,
                text=True,
                timeout=GIT_TIMEOUT,
                cwd=self.cwd,
                check=False,
            )
        except (subprocess.SubprocessError, OSError) as e:
            raise EnvironmentSetupError(f"Can't run command 'git {' '.join(args)}': {e}") from e

    def run(self, *args: str) -> str:
        """
        Run git and return stdout.

        Raises:
            GitCommandError: If git exits non-zero
        """
        result = self._run(list(args))
        if result.returncode != 0:
            raise GitCommandError(list(args), result.returncode, result.stderr or result.stdout)
        return result.stdout

    def remotes(self) -> list[Remote]:
        result = self._run(["remote", "-v"])
        if result.returncode != 0:
            logger.debug("git remote -v failed", code=result.returncode)
            return []
        return parse_remotes(result.stdout)

    def config_get(self, key: str) -> Optional[str]:
        """Read a config value; unset keys yield None."""
        result = self._run(["config", key])
        value = result.stdout.strip()
        if result.returncode != 0 or not value:
            return None
        return value

    def config_set_global(self, key: str, value: str) -> None:
        self.run("config", "--global", key, value)

    def current_branch(self) -> Optional[str]:
        result = self._run(["symbolic-ref", "--quiet", "--short", "HEAD"])
        branch = result.stdout.strip()
        if result.returncode != 0 or not branch:
            return None
        return branch

    def branch_exists(self, branch: str) -> bool:
        result = self._run(["rev-parse", "--verify", "--quiet", f"refs/heads/{branch}"])
        return result.returncode == 0
