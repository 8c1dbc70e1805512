"""Pytest configuration and fixtures for ImpactTrace tests."""

import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from impacttrace_cli.config import API_KEY_ENV_VAR, PROVIDER_KEY_ENV_VARS
from impacttrace_cli.models import ChangeRecord


class StubOracle:
    """Canned oracle: returns the first response whose needle occurs in the prompt."""

    def __init__(self, responses: Sequence[Tuple[str, Optional[str]]] = (), default: Optional[str] = ""):
        self.responses = list(responses)
        self.default = default
        self.prompts: List[str] = []

    def generate(self, prompt: str) -> Optional[str]:
        self.prompts.append(prompt)
        for needle, response in self.responses:
            if needle in prompt:
                return response
        return self.default


class FailingOracle:
    """Oracle whose every call blows up."""

    def __init__(self):
        self.calls = 0

    def generate(self, prompt: str) -> Optional[str]:
        self.calls += 1
        raise RuntimeError("oracle unreachable")


class FakeChangeReader:
    """In-memory change reader."""

    def __init__(
        self,
        changes: Sequence[ChangeRecord] = (),
        diffs: Optional[Dict[str, str]] = None,
        working: Optional[Dict[str, str]] = None,
        revisions: Optional[Dict[Tuple[str, str], str]] = None,
    ):
        self.changes = list(changes)
        self.diffs = diffs or {}
        self.working = working or {}
        self.revisions = revisions or {}

    def list_changes(self, commit: str) -> List[ChangeRecord]:
        return list(self.changes)

    def diff(self, commit: str, file_path: str) -> str:
        return self.diffs.get(file_path, "")

    def content_at(self, file_path: str, revision: str) -> str:
        return self.revisions.get((file_path, revision), "")

    def read_working_file(self, file_path: str) -> str:
        return self.working.get(file_path, "")

    @staticmethod
    def parent_revision(commit: str) -> str:
        return f"{commit}^"


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch):
    """Point the TOML config at a temp file and clear API key variables."""
    monkeypatch.setattr("impacttrace_cli.config_manager.CONFIG_FILE", tmp_path / "home" / "config.toml")
    monkeypatch.delenv(API_KEY_ENV_VAR, raising=False)
    for var in PROVIDER_KEY_ENV_VARS.values():
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def stub_oracle() -> StubOracle:
    return StubOracle()


@pytest.fixture
def sample_project_path() -> Path:
    """Get path to the sample Playwright project."""
    return Path(__file__).parent / "fixtures" / "sample_project"


def _git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=str(repo),
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


class GitRepo:
    """Throwaway git repository for reader and CLI tests."""

    def __init__(self, path: Path):
        self.path = path
        _git(path, "init", "-q")
        _git(path, "config", "user.email", "tests@example.com")
        _git(path, "config", "user.name", "Tests")
        _git(path, "config", "commit.gpgsign", "false")

    def write(self, rel_path: str, content: str) -> None:
        target = self.path / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)

    def remove(self, rel_path: str) -> None:
        _git(self.path, "rm", "-q", rel_path)

    def move(self, src: str, dst: str) -> None:
        _git(self.path, "mv", src, dst)

    def commit(self, message: str) -> str:
        _git(self.path, "add", "-A")
        _git(self.path, "commit", "-q", "-m", message)
        return _git(self.path, "rev-parse", "HEAD")


@pytest.fixture
def git_repo(tmp_path: Path) -> GitRepo:
    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    repo_dir = tmp_path / "repo"
    repo_dir.mkdir()
    return GitRepo(repo_dir)


@pytest.fixture
def sample_git_repo(git_repo: GitRepo, sample_project_path: Path) -> GitRepo:
    """Git repository seeded with the sample project as its first commit."""
    for file_path in sorted(sample_project_path.rglob("*.ts")):
        rel = file_path.relative_to(sample_project_path).as_posix()
        git_repo.write(rel, file_path.read_text())
    git_repo.commit("initial")
    return git_repo
