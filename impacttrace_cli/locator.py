"""Literal text search used as a coarse reverse-dependency index."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, List

from .config import DEFAULT_SKIP_DIRS, DEFAULT_SOURCE_EXTENSIONS

logger = logging.getLogger(__name__)


class DependencyLocator:
    """Finds repository files whose text contains a symbol.

    Matching is plain substring containment, so ``total`` also matches
    ``calcTotal``. Re-exports and aliases are not followed.
    """

    def __init__(
        self,
        repo_path: Path,
        extensions: Iterable[str] = DEFAULT_SOURCE_EXTENSIONS,
        skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS,
    ):
        self.repo_path = Path(repo_path).resolve()
        self.extensions = tuple(extensions)
        self.skip_dirs = set(skip_dirs)

    def iter_source_files(self) -> Iterator[Path]:
        """Yield tracked source files in repo-relative path order."""
        found: List[Path] = []
        for dirpath, dirnames, filenames in os.walk(self.repo_path):
            # Pruned in place so skipped trees are never descended into.
            dirnames[:] = [d for d in dirnames if d not in self.skip_dirs]
            found.extend(Path(dirpath) / name for name in filenames if name.endswith(self.extensions))
        yield from sorted(found, key=lambda p: p.relative_to(self.repo_path).as_posix())

    def find_files_containing(self, symbol: str) -> List[str]:
        """Return repo-relative POSIX paths of source files containing ``symbol``."""
        if not symbol:
            return []

        matches: List[str] = []
        for file_path in self.iter_source_files():
            try:
                content = file_path.read_text(encoding="utf-8", errors="replace")
            except OSError as exc:
                logger.warning("Skipping unreadable file %s: %s", file_path, exc)
                continue
            if symbol in content:
                matches.append(file_path.relative_to(self.repo_path).as_posix())
        return matches
