"""Tests for the git-backed change reader."""

from pathlib import Path

import pytest

from impacttrace_cli.errors import RepositoryError
from impacttrace_cli.git_reader import GitChangeReader
from impacttrace_cli.models import ChangeRecord, ChangeStatus


class TestGitChangeReader:
    """Tests for GitChangeReader against a real repository."""

    def test_not_a_repository(self, tmp_path: Path):
        plain = tmp_path / "plain"
        plain.mkdir()
        with pytest.raises(RepositoryError):
            GitChangeReader(plain)

    def test_missing_path(self, tmp_path: Path):
        with pytest.raises(RepositoryError):
            GitChangeReader(tmp_path / "missing")

    def test_subdirectory_binds_to_top_level(self, sample_git_repo):
        sample_git_repo.write("e2e/login.spec.ts", "test('user can log out', async () => {});\n")
        sha = sample_git_repo.commit("log out")

        reader = GitChangeReader(sample_git_repo.path / "e2e")

        assert reader.repo_path == sample_git_repo.path.resolve()
        assert reader.list_changes(sha) == [ChangeRecord("e2e/login.spec.ts", ChangeStatus.MODIFIED)]
        assert "user can log out" in reader.read_working_file("e2e/login.spec.ts")

    def test_resolve_commit(self, sample_git_repo):
        reader = GitChangeReader(sample_git_repo.path)
        sha = reader.resolve_commit("HEAD")

        assert sha is not None and len(sha) == 40
        assert reader.resolve_commit(sha[:10]) == sha
        assert reader.resolve_commit("deadbeefdeadbeef") is None

    def test_list_changes_of_root_commit(self, sample_git_repo):
        reader = GitChangeReader(sample_git_repo.path)

        changes = reader.list_changes("HEAD")

        assert ChangeRecord("src/utils.ts", ChangeStatus.ADDED) in changes
        assert ChangeRecord("e2e/login.spec.ts", ChangeStatus.ADDED) in changes
        assert len(changes) == 4

    def test_list_changes_statuses(self, sample_git_repo):
        sample_git_repo.write("src/utils.ts", "export function calcTotal(tax = 0) {}\n")
        sample_git_repo.remove("e2e/login.spec.ts")
        sample_git_repo.write("e2e/search.spec.ts", "test('search works', () => {});\n")
        sha = sample_git_repo.commit("mixed")

        changes = GitChangeReader(sample_git_repo.path).list_changes(sha)

        assert set(changes) == {
            ChangeRecord("src/utils.ts", ChangeStatus.MODIFIED),
            ChangeRecord("e2e/login.spec.ts", ChangeStatus.DELETED),
            ChangeRecord("e2e/search.spec.ts", ChangeStatus.ADDED),
        }

    def test_rename_produces_delete_and_add(self, sample_git_repo):
        sample_git_repo.move("e2e/login.spec.ts", "e2e/auth.spec.ts")
        sha = sample_git_repo.commit("rename")

        changes = GitChangeReader(sample_git_repo.path).list_changes(sha)

        assert changes == [
            ChangeRecord("e2e/login.spec.ts", ChangeStatus.DELETED),
            ChangeRecord("e2e/auth.spec.ts", ChangeStatus.ADDED),
        ]

    def test_unknown_commit_lists_nothing(self, sample_git_repo):
        assert GitChangeReader(sample_git_repo.path).list_changes("0" * 40) == []

    def test_diff(self, sample_git_repo):
        sample_git_repo.write("src/utils.ts", "export function calcTotal(tax = 0) {}\n")
        sha = sample_git_repo.commit("change utils")

        diff = GitChangeReader(sample_git_repo.path).diff(sha, "src/utils.ts")

        assert "+export function calcTotal(tax = 0) {}" in diff
        assert diff.startswith("diff --git")

    def test_diff_of_root_commit(self, sample_git_repo):
        diff = GitChangeReader(sample_git_repo.path).diff("HEAD", "src/utils.ts")

        assert "+export function calcTotal" in diff

    def test_diff_of_unknown_commit_is_empty(self, sample_git_repo):
        assert GitChangeReader(sample_git_repo.path).diff("0" * 40, "src/utils.ts") == ""

    def test_content_at_parent_of_deletion(self, sample_git_repo, sample_project_path: Path):
        sample_git_repo.remove("e2e/login.spec.ts")
        sha = sample_git_repo.commit("drop login")
        reader = GitChangeReader(sample_git_repo.path)

        content = reader.content_at("e2e/login.spec.ts", reader.parent_revision(sha))

        assert content == (sample_project_path / "e2e" / "login.spec.ts").read_text()
        assert reader.content_at("e2e/login.spec.ts", sha) == ""

    def test_content_at_missing_revision(self, sample_git_repo):
        reader = GitChangeReader(sample_git_repo.path)

        assert reader.content_at("src/utils.ts", "HEAD^") == ""

    def test_read_working_file(self, sample_git_repo):
        reader = GitChangeReader(sample_git_repo.path)

        assert "calcTotal" in reader.read_working_file("src/utils.ts")
        assert reader.read_working_file("src/missing.ts") == ""
