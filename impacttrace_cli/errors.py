"""Exceptions raised by ImpactTrace."""

from __future__ import annotations


class ImpactTraceError(Exception):
    """Base class for ImpactTrace errors."""


class RepositoryError(ImpactTraceError):
    """Raised when the repository path or commit cannot be resolved."""
