"""Git-backed change reader.

Wraps the ``git`` command line. Every read is forgiving: a revision or path
that git cannot resolve produces an empty result and a log line, never an
exception, because missing content is a normal input for the rest of the
pipeline.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from .config import GIT_TIMEOUT_SECONDS
from .errors import RepositoryError
from .models import ChangeRecord, records_from_name_status

logger = logging.getLogger(__name__)


class GitChangeReader:
    """Reads changed files, diffs, and file contents for a commit."""

    def __init__(self, repo_path: Path, timeout: int = GIT_TIMEOUT_SECONDS):
        """Bind the reader to a repository.

        ``repo_path`` may point anywhere inside the work tree; the reader
        rebinds to the top level, since git reports paths relative to it.

        Raises:
            RepositoryError: If ``repo_path`` is not inside a git work tree.
        """
        self.repo_path = Path(repo_path).resolve()
        self.timeout = timeout

        if not self.repo_path.is_dir():
            raise RepositoryError(f"Repository path does not exist: {self.repo_path}")
        toplevel = self._git("rev-parse", "--show-toplevel")
        if toplevel is None or not toplevel.strip():
            raise RepositoryError(f"Not a git repository: {self.repo_path}")
        self.repo_path = Path(toplevel.strip()).resolve()

    def _git(self, *args: str) -> Optional[str]:
        """Run a git command in the repository, returning stdout or None on failure."""
        try:
            result = subprocess.run(
                ["git", "-c", "core.quotepath=off", *args],
                cwd=str(self.repo_path),
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except FileNotFoundError:
            logger.warning("git executable not found on PATH")
            return None
        except subprocess.TimeoutExpired:
            logger.warning("git %s timed out after %ss", " ".join(args), self.timeout)
            return None

        if result.returncode != 0:
            logger.debug("git %s failed: %s", " ".join(args), result.stderr.strip())
            return None
        return result.stdout

    def resolve_commit(self, commit: str) -> Optional[str]:
        """Return the full sha for ``commit`` or None if git cannot resolve it."""
        out = self._git("rev-parse", "--verify", "--quiet", f"{commit}^{{commit}}")
        return out.strip() if out else None

    @staticmethod
    def parent_revision(commit: str) -> str:
        return f"{commit}^"

    def list_changes(self, commit: str) -> List[ChangeRecord]:
        """List the files touched by ``commit`` with their change status."""
        out = self._git("show", "--name-status", "--format=", commit)
        if out is None:
            logger.warning("Could not list changes for commit %s", commit)
            return []

        records: List[ChangeRecord] = []
        for line in out.splitlines():
            parts = line.strip().split("\t")
            if len(parts) < 2:
                continue
            records.extend(records_from_name_status(parts[0], parts[1:]))
        return records

    def diff(self, commit: str, file_path: str) -> str:
        """Unified diff of ``file_path`` as changed by ``commit``."""
        out = self._git("show", "--format=", "--no-color", commit, "--", file_path)
        if out is None:
            logger.warning("Could not read diff of %s at %s", file_path, commit)
            return ""
        return out

    def content_at(self, file_path: str, revision: str) -> str:
        """File content at ``revision``; empty if the path did not exist there."""
        out = self._git("show", f"{revision}:{file_path}")
        return out if out is not None else ""

    def read_working_file(self, file_path: str) -> str:
        """Current working-tree content of ``file_path``; empty if absent."""
        full_path = self.repo_path / file_path
        if not full_path.is_file():
            return ""
        try:
            return full_path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.warning("Could not read %s: %s", full_path, exc)
            return ""
