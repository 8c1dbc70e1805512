"""Rendering of the final impact report."""

from __future__ import annotations

import json
from typing import List, Optional, Sequence

from .models import ImpactDescriptor

NO_IMPACT = "No tests appear to be impacted."


def render_line(descriptor: ImpactDescriptor) -> str:
    status = descriptor.status.value.lower()
    return f'1 test {status}: "{descriptor.test_name}" in {descriptor.source_file}'


def render_report(descriptors: Sequence[ImpactDescriptor]) -> List[str]:
    """One line per impacted test in discovery order, or the no-impact sentinel."""
    if not descriptors:
        return [NO_IMPACT]
    return [render_line(d) for d in descriptors]


def render_json(descriptors: Sequence[ImpactDescriptor], commit: Optional[str] = None) -> str:
    payload = {
        "commit": commit,
        "impacted": [d.to_dict() for d in descriptors],
    }
    return json.dumps(payload, indent=2)
