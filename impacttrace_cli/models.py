"""Core data models shared by the reader, classifier, and aggregation layers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, NamedTuple


class ChangeStatus(str, Enum):
    ADDED = "Added"
    MODIFIED = "Modified"
    DELETED = "Deleted"


class ImpactStatus(str, Enum):
    ADDED = "Added"
    REMOVED = "Removed"
    MODIFIED = "Modified"


class Provenance(str, Enum):
    DIRECT = "Direct"
    INDIRECT = "Indirect"


@dataclass(frozen=True)
class ChangeRecord:
    file_path: str
    status: ChangeStatus

    @property
    def is_deleted(self) -> bool:
        return self.status is ChangeStatus.DELETED


class ImpactKey(NamedTuple):
    test_name: str
    source_file: str


@dataclass
class ImpactDescriptor:
    test_name: str
    status: ImpactStatus
    source_file: str
    provenance: Provenance

    @property
    def key(self) -> ImpactKey:
        return ImpactKey(self.test_name, self.source_file)

    def to_dict(self) -> dict:
        return {
            "test": self.test_name,
            "status": self.status.value.lower(),
            "file": self.source_file,
            "provenance": self.provenance.value.lower(),
        }


def records_from_name_status(letter: str, paths: List[str]) -> List[ChangeRecord]:
    """Translate one ``git --name-status`` entry into change records.

    Renames produce a deletion of the old path followed by an addition of the
    new one; copies produce only the addition. Unknown letters yield nothing.
    """
    if not letter or not paths:
        return []

    code = letter[0].upper()
    if code == "A":
        return [ChangeRecord(paths[0], ChangeStatus.ADDED)]
    if code in ("M", "T"):
        return [ChangeRecord(paths[0], ChangeStatus.MODIFIED)]
    if code == "D":
        return [ChangeRecord(paths[0], ChangeStatus.DELETED)]
    if code == "R" and len(paths) >= 2:
        return [
            ChangeRecord(paths[0], ChangeStatus.DELETED),
            ChangeRecord(paths[1], ChangeStatus.ADDED),
        ]
    if code == "C" and len(paths) >= 2:
        return [ChangeRecord(paths[1], ChangeStatus.ADDED)]
    return []
