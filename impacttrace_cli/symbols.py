"""Changed-symbol extraction from a helper file's diff."""

from __future__ import annotations

import logging
import re
from typing import List

from .classifier import Oracle, truncate
from .config import SYMBOL_DIFF_CHAR_BUDGET

logger = logging.getLogger(__name__)

SYMBOL_PROMPT = """
You are a senior software engineer.
Analyze the following git diff and identify the names of EXPORTED functions, classes, or top-level constants that were modified, added, or removed.
Ignore internal variables or locals within function bodies.
Return ONLY a comma-separated list of names. No explanation, no markdown.

DIFF:
{diff}
"""

_FENCE_RE = re.compile(r"```")
_QUOTES_RE = re.compile(r"['\"`]")


def parse_symbol_list(text: str) -> List[str]:
    """Turn the oracle's comma-separated answer into clean symbol names.

    Any answer mentioning "none" (case-insensitive) means no symbols.
    """
    text = (text or "").strip()
    if not text or "none" in text.lower():
        return []

    symbols: List[str] = []
    for token in text.split(","):
        cleaned = _QUOTES_RE.sub("", _FENCE_RE.sub("", token.strip())).strip()
        if cleaned and cleaned not in symbols:
            symbols.append(cleaned)
    return symbols


class SymbolExtractor:
    """Asks the oracle which exported symbols a diff touches."""

    def __init__(self, llm: Oracle):
        self.llm = llm

    def extract_changed_symbols(self, diff: str) -> List[str]:
        if not diff or not diff.strip():
            return []

        prompt = SYMBOL_PROMPT.format(diff=truncate(diff, SYMBOL_DIFF_CHAR_BUDGET))
        try:
            response = self.llm.generate(prompt)
        except Exception as exc:
            logger.warning("Symbol extraction failed: %s", exc)
            return []

        if response is None:
            logger.warning("Symbol extraction returned no response")
            return []
        return parse_symbol_list(response)
