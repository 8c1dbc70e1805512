"""ImpactTrace CLI — commit-level impact analysis for end-to-end test suites."""

__version__ = "1.0.0"
