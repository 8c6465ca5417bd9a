"""
VCS — read the release version and working-tree state from git.
"""
import logging
from pathlib import Path
from typing import Optional

from crossbuild.core.shell import run_command

logger = logging.getLogger(__name__)


class VersionUnavailableError(RuntimeError):
    """No tag could be read from the repository."""


class DirtyWorkingTreeError(RuntimeError):
    """The working tree has uncommitted changes."""


def read_latest_tag(repo_dir: Path, timeout: Optional[int] = None) -> str:
    """Return the most recent tag reachable from HEAD."""
    result = run_command(
        ["git", "describe", "--abbrev=0", "--tags"],
        cwd=repo_dir,
        timeout=timeout,
    )
    version = result.stdout.strip()
    if not result.ok or not version:
        raise VersionUnavailableError(
            f"Cannot read latest tag in {repo_dir}: {result.stderr.strip() or 'no tags'}"
        )
    return version


def read_diff(repo_dir: Path, timeout: Optional[int] = None) -> str:
    """Return the unstaged diff of the working tree ('' when clean)."""
    result = run_command(["git", "diff"], cwd=repo_dir, timeout=timeout)
    result.check()
    return result.stdout.strip()


def is_dirty(repo_dir: Path, timeout: Optional[int] = None) -> bool:
    dirty = bool(read_diff(repo_dir, timeout=timeout))
    if dirty:
        logger.warning("Working tree in %s has uncommitted changes", repo_dir)
    return dirty
