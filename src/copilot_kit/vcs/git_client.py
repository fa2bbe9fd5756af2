"""
Git client implementation for copilot_kit.

This module wraps the few read-only Git operations the skill scaffolder
needs: locating a repository root and listing the commits of a revision
range. All subprocess calls go through :meth:`GitClient._run` so that
unit tests can mock them easily.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Logs will propagate to the root when configured by the CLI.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# One line per commit: abbreviated hash, a space, the subject line.
LOG_FORMAT = "%h %s"


class GitError(Exception):
    """Raised when a Git command fails."""

    pass


class GitClient:
    """Client for reading history from a Git repository."""

    def __init__(self, repo_root: Optional[Path] = None) -> None:
        self.repo_root = repo_root

    # ------------------------------------------------------------------
    # Static helpers
    # ------------------------------------------------------------------
    @staticmethod
    def is_repo(path: Path) -> bool:
        """Return True if the given path is the root of a Git repository."""
        return (path / ".git").exists()

    @staticmethod
    def find_repo_root(start: Path) -> Optional[Path]:
        """Find the root of the Git repository starting from ``start``.

        Walk upwards until a ``.git`` directory is found or the filesystem
        root is reached.
        """
        current = start.resolve()
        while True:
            if GitClient.is_repo(current):
                return current
            if current.parent == current:
                return None
            current = current.parent

    # ------------------------------------------------------------------
    # Basic Git commands
    # ------------------------------------------------------------------
    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a Git command in the repository root.

        Raises
        ------
        GitError
            If the command exits with a non-zero status when ``check`` is True.
        OSError
            If the ``git`` executable cannot be started.
        """
        full_cmd = ["git"] + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd))
        result = subprocess.run(
            full_cmd,
            cwd=self.repo_root,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",  # Replace invalid characters instead of failing
        )

        if check and result.returncode != 0:
            logger.error(
                "Git command failed: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stderr,
            )
            raise GitError(result.stderr.strip() or result.stdout.strip())
        return result

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------
    def log_lines(self, commit_range: str, max_count: Optional[int] = None) -> List[str]:
        """Return ``<hash> <subject>`` lines for every commit in ``commit_range``.

        Lines are in ``git log`` order (newest first). Blank lines are
        dropped.

        Parameters
        ----------
        commit_range : str
            A revision range such as ``HEAD~5..HEAD``. It is always read as
            a revision, never as an option.
        max_count : int, optional
            Stop after this many commits.

        Raises
        ------
        GitError
            If the range is invalid or the directory is not a repository.
        """
        args = ["log", "--no-color", f"--pretty=format:{LOG_FORMAT}"]
        if max_count is not None:
            args.append(f"--max-count={max_count}")
        args += ["--end-of-options", commit_range, "--"]
        result = self._run(args, check=True)
        return [line for line in result.stdout.splitlines() if line.strip()]
