"""Test impact classification via the semantic oracle.

The classifier only builds prompts and relays the oracle's raw text. Parsing
of the ``- "Test Name" [Status]`` lines happens in the aggregator, which is the
single place that decides what the oracle's answer means.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence

from .config import CONTENT_CHAR_BUDGET, TEST_DIFF_CHAR_BUDGET

logger = logging.getLogger(__name__)

NO_CONTENT = "File content is empty."
ANALYSIS_ERROR = "Error analyzing impact."

DIFF_MODE_PROMPT = """
You are a QA Engineer specializing in Playwright.
Analyze the git diff of this test file and identify which test cases were Impacted (Added, Removed, or Modified).

Label each impacted test as:
- [Added] if the test is new.
- [Removed] if the test was deleted.
- [Modified] if the test body or title was changed.

Important: For each change in the diff, find the nearest wrapping test('Name', ...) call to identify the test name.

Format: - "Test Name" [Status]

DIFF:
{diff}

FULL FILE CONTENT (for context):
{content}
"""

SYMBOL_MODE_PROMPT = """
You are a QA Engineer specializing in Playwright.
The following helper symbols used in this test file have changed: {symbols}.
Analyze the file content and identify ONLY the test cases (test('name', ...)) that actually call or use one of these modified symbols.

Do NOT list tests that do not use these symbols.

Format: - "Test Name" [Modified]

FILE CONTENT:
{content}
"""


class Oracle(Protocol):
    """Anything that turns a prompt into text, or None when it cannot."""

    def generate(self, prompt: str) -> Optional[str]:
        ...


def truncate(text: str, budget: int) -> str:
    """Silently cut ``text`` to at most ``budget`` characters."""
    if budget <= 0:
        return ""
    return text[:budget]


class TestImpactClassifier:
    """Finds impacted tests in one test file, either from its diff or from changed symbols."""

    __test__ = False  # not a pytest test class

    def __init__(self, llm: Oracle):
        self.llm = llm

    def build_prompt(
        self,
        file_content: str,
        diff: Optional[str] = None,
        symbols: Optional[Sequence[str]] = None,
    ) -> str:
        content = truncate(file_content, CONTENT_CHAR_BUDGET)
        if diff is not None:
            return DIFF_MODE_PROMPT.format(
                diff=truncate(diff, TEST_DIFF_CHAR_BUDGET),
                content=content,
            )
        symbol_text = ", ".join(symbols) if symbols else "unknown symbols"
        return SYMBOL_MODE_PROMPT.format(symbols=symbol_text, content=content)

    def classify_impact(
        self,
        file_content: str,
        diff: Optional[str] = None,
        symbols: Optional[Sequence[str]] = None,
    ) -> str:
        """Return the oracle's raw impact listing for one test file.

        Args:
            file_content: Full text of the test file (post-commit, or parent
                revision for deleted files).
            diff: The file's diff. When given, the oracle labels tests as
                Added/Removed/Modified from the literal change.
            symbols: Changed helper symbols, used when ``diff`` is None; every
                test using one of them is reported as Modified.

        Returns:
            Raw oracle text, ``NO_CONTENT`` for blank files, or
            ``ANALYSIS_ERROR`` when the oracle fails.
        """
        if not file_content or not file_content.strip():
            return NO_CONTENT

        prompt = self.build_prompt(file_content, diff, symbols)
        try:
            response = self.llm.generate(prompt)
        except Exception as exc:
            logger.warning("Impact classification failed: %s", exc)
            return ANALYSIS_ERROR

        if response is None:
            logger.warning("Impact classification returned no response")
            return ANALYSIS_ERROR
        return response.strip()
