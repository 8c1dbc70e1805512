"""Change-impact propagation engine.

Coordinates the change reader, symbol extractor, dependency locator and test
impact classifier, and feeds every finding into one :class:`ImpactAggregator`.
Work is strictly sequential so that discovery order, and with it the
first-write-wins rule of the aggregator, is deterministic.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import AbstractSet, Callable, Dict, List, Optional, Protocol

from .aggregator import ImpactAggregator
from .classifier import TestImpactClassifier
from .config_manager import AnalysisSettings
from .locator import DependencyLocator
from .models import ChangeRecord, ImpactDescriptor, Provenance
from .symbols import SymbolExtractor

logger = logging.getLogger(__name__)

DELETED_FILE_DIFF = "ALL TESTS REMOVED in {file}"


class ChangeReader(Protocol):
    def list_changes(self, commit: str) -> List[ChangeRecord]:
        ...

    def diff(self, commit: str, file_path: str) -> str:
        ...

    def content_at(self, file_path: str, revision: str) -> str:
        ...

    def read_working_file(self, file_path: str) -> str:
        ...

    def parent_revision(self, commit: str) -> str:
        ...


@dataclass
class ImpactAnalysis:
    commit: str
    changes: List[ChangeRecord]
    descriptors: List[ImpactDescriptor]
    symbols_by_file: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def has_impact(self) -> bool:
        return bool(self.descriptors)


class ImpactEngine:
    """Runs direct and one-hop indirect impact detection for a commit."""

    def __init__(
        self,
        reader: ChangeReader,
        symbol_extractor: SymbolExtractor,
        locator: DependencyLocator,
        classifier: TestImpactClassifier,
        settings: Optional[AnalysisSettings] = None,
        on_event: Optional[Callable[[str], None]] = None,
    ):
        self.reader = reader
        self.symbol_extractor = symbol_extractor
        self.locator = locator
        self.classifier = classifier
        self.settings = settings or AnalysisSettings()
        self._on_event = on_event

    def _emit(self, message: str) -> None:
        logger.info(message)
        if self._on_event:
            self._on_event(message)

    def is_test_file(self, path: str) -> bool:
        return path.endswith(self.settings.test_suffixes)

    def is_helper_file(self, path: str) -> bool:
        return not self.is_test_file(path) and path.endswith(self.settings.source_extensions)

    def _post_commit_content(self, commit: str, file_path: str) -> str:
        if self.settings.read_from_commit:
            return self.reader.content_at(file_path, commit)
        return self.reader.read_working_file(file_path)

    def analyze(self, commit: str) -> ImpactAnalysis:
        """Compute the impacted tests of ``commit``.

        Test-file changes are processed before helper changes, each group in
        the order git lists them.
        """
        aggregator = ImpactAggregator()
        changes = self.reader.list_changes(commit)
        symbols_by_file: Dict[str, List[str]] = {}

        test_changes = [c for c in changes if self.is_test_file(c.file_path)]
        helper_changes = [c for c in changes if self.is_helper_file(c.file_path)]
        # Deleted test files are settled by the direct pass as Removed.
        deleted_paths = {c.file_path for c in changes if c.is_deleted}

        for change in test_changes:
            self._process_direct(commit, change, aggregator)

        for change in helper_changes:
            symbols_by_file[change.file_path] = self._process_helper(commit, change, aggregator, deleted_paths)

        return ImpactAnalysis(
            commit=commit,
            changes=changes,
            descriptors=aggregator.descriptors(),
            symbols_by_file=symbols_by_file,
        )

    def _process_direct(self, commit: str, change: ChangeRecord, aggregator: ImpactAggregator) -> None:
        file_path = change.file_path
        self._emit(f"Direct change [{change.status.value}]: {file_path}")

        if change.is_deleted:
            content = self.reader.content_at(file_path, self.reader.parent_revision(commit))
            diff = DELETED_FILE_DIFF.format(file=file_path)
        else:
            content = self._post_commit_content(commit, file_path)
            diff = self.reader.diff(commit, file_path)

        raw = self.classifier.classify_impact(content, diff)
        aggregator.ingest(raw, file_path, Provenance.DIRECT, deleted=change.is_deleted)

    def _process_helper(
        self,
        commit: str,
        change: ChangeRecord,
        aggregator: ImpactAggregator,
        deleted_paths: AbstractSet[str] = frozenset(),
    ) -> List[str]:
        file_path = change.file_path
        self._emit(f"Helper changed: {file_path}. Tracing dependencies...")

        diff = self.reader.diff(commit, file_path)
        symbols = self.symbol_extractor.extract_changed_symbols(diff)
        classified = set()

        for symbol in symbols:
            self._emit(f'Symbol modified: "{symbol}"')
            for dependent in self.locator.find_files_containing(symbol):
                if not self.is_test_file(dependent) or dependent in classified or dependent in deleted_paths:
                    continue
                classified.add(dependent)
                self._emit(f"Dependency impact: {dependent}")

                content = self._post_commit_content(commit, dependent)
                raw = self.classifier.classify_impact(content, None, symbols)
                aggregator.ingest(raw, dependent, Provenance.INDIRECT)
        return symbols
