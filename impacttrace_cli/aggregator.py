"""Impact aggregation: parse, deduplicate, and reconcile classifier findings.

The aggregator keeps one entry per ``(test name, source file)`` key, in the
order keys were first discovered. The first discovery of a key wins; later
discoveries of the same key are ignored. Because direct test-file changes are
fed in before dependency traces, direct findings take precedence over indirect
ones for the same test.

Deletion is taken from version control, not from the oracle: every test found
in a deleted file is recorded as Removed whatever label the oracle gave it.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

from .models import ImpactDescriptor, ImpactKey, ImpactStatus, Provenance

logger = logging.getLogger(__name__)

IMPACT_LINE_PREFIX = "- "

_STATUS_TAG_RE = re.compile(r"\[(Added|Removed|Modified)\]")


def parse_impact_line(line: str) -> Optional[Tuple[str, ImpactStatus]]:
    """Parse one ``- "Test Name" [Status]`` line.

    Returns:
        ``(test_name, status)``, or None for commentary and malformed lines.
        A line with no status tag counts as Modified.
    """
    stripped = line.strip()
    if not stripped.startswith(IMPACT_LINE_PREFIX):
        return None

    body = stripped[len(IMPACT_LINE_PREFIX):]
    tags = _STATUS_TAG_RE.findall(body)
    status = ImpactStatus(tags[-1]) if tags else ImpactStatus.MODIFIED

    name = _STATUS_TAG_RE.sub("", body).replace('"', "").strip()
    if not name:
        return None
    return name, status


class ImpactAggregator:
    """Ordered, first-write-wins collection of impacted tests."""

    def __init__(self) -> None:
        self._entries: Dict[ImpactKey, ImpactDescriptor] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: ImpactKey) -> Optional[ImpactDescriptor]:
        return self._entries.get(key)

    def add(self, descriptor: ImpactDescriptor) -> bool:
        """Insert ``descriptor`` unless its key is already known."""
        if descriptor.key in self._entries:
            logger.debug("Keeping existing entry for %s", descriptor.key)
            return False
        self._entries[descriptor.key] = descriptor
        return True

    def ingest(
        self,
        raw_output: str,
        source_file: str,
        provenance: Provenance,
        deleted: bool = False,
    ) -> int:
        """Feed one classifier answer for ``source_file`` into the map.

        Args:
            raw_output: Oracle text; only ``- `` lines are considered.
            source_file: Test file the answer is about.
            provenance: Detection path that produced the answer.
            deleted: True when version control reports ``source_file`` as
                deleted; forces every status to Removed.

        Returns:
            Number of new entries inserted.
        """
        inserted = 0
        for line in (raw_output or "").splitlines():
            parsed = parse_impact_line(line)
            if parsed is None:
                continue
            test_name, status = parsed
            if deleted:
                status = ImpactStatus.REMOVED
            descriptor = ImpactDescriptor(
                test_name=test_name,
                status=status,
                source_file=source_file,
                provenance=provenance,
            )
            if self.add(descriptor):
                inserted += 1
        return inserted

    def descriptors(self) -> List[ImpactDescriptor]:
        return list(self._entries.values())

    def clear(self) -> None:
        self._entries.clear()
