"""Configuration paths and analysis constants for ImpactTrace."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("IMPACTTRACE_HOME", str(Path.home() / ".impacttrace"))).expanduser()

# Character budgets handed to the classifier; the tail beyond them is dropped.
SYMBOL_DIFF_CHAR_BUDGET = 5000
TEST_DIFF_CHAR_BUDGET = 20000
CONTENT_CHAR_BUDGET = 100000

DEFAULT_TEST_SUFFIXES = (".spec.ts", ".test.ts")
DEFAULT_SOURCE_EXTENSIONS = (".ts",)
DEFAULT_SKIP_DIRS = (".git", "node_modules")

GIT_TIMEOUT_SECONDS = 30


# Tool-wide API key, consulted for every provider before the vendor variable.
API_KEY_ENV_VAR = "IMPACTTRACE_API_KEY"

# Vendor API key variables; each is only ever sent to its own provider.
PROVIDER_KEY_ENV_VARS = {
    "gemini": "GEMINI_API_KEY",
    "openai": "OPENAI_API_KEY",
    "groq": "GROQ_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}
