"""Tests for reltagger.services.git (checkout, identity, tags)."""

import shutil
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from reltagger.services.git import (
    GitRunnerError,
    checkout_repository,
    configure_identity,
    create_annotated_tag,
    is_working_copy,
    push_tag,
)
from reltagger.services.git._run import NETWORK_TIMEOUT, _run_git


class TestRunGit:
    """_run_git wraps subprocess errors into GitRunnerError."""

    def test_returns_stdout(self) -> None:
        completed = subprocess.CompletedProcess(["git"], 0, stdout="ok\n", stderr="")
        with patch("reltagger.services.git._run.subprocess.run", return_value=completed) as mock_run:
            assert _run_git(["status"], cwd=Path("/tmp/repo")) == "ok\n"
        assert mock_run.call_args[0][0] == ["git", "status"]
        assert mock_run.call_args[1]["cwd"] == Path("/tmp/repo")

    def test_non_zero_exit_raises(self) -> None:
        err = subprocess.CalledProcessError(128, ["git", "tag"], output="", stderr="fatal: tag 'v1' already exists")
        with patch("reltagger.services.git._run.subprocess.run", side_effect=err):
            with pytest.raises(GitRunnerError, match="already exists"):
                _run_git(["tag", "-a", "v1", "-m", "Release v1"], cwd=Path("/tmp/repo"))

    def test_git_missing_raises(self) -> None:
        with patch("reltagger.services.git._run.subprocess.run", side_effect=FileNotFoundError()):
            with pytest.raises(GitRunnerError, match="git not found"):
                _run_git(["status"], cwd=Path("/tmp/repo"))

    def test_timeout_raises(self) -> None:
        with patch(
            "reltagger.services.git._run.subprocess.run",
            side_effect=subprocess.TimeoutExpired(["git", "push"], 5),
        ):
            with pytest.raises(GitRunnerError, match="timed out"):
                _run_git(["push"], cwd=Path("/tmp/repo"), timeout=5)


class TestCheckout:
    """checkout_repository: clone when needed, fetch, reset base branch to merge commit."""

    def test_existing_working_copy_fetches_and_checks_out_sha(self, tmp_path: Path) -> None:
        (tmp_path / ".git").mkdir()
        with patch("reltagger.services.git.checkout._run_git") as mock_run:
            checkout_repository("main", repo_dir=tmp_path, sha="abc123")
        assert [c[0][0] for c in mock_run.call_args_list] == [
            ["fetch", "--tags", "origin", "main"],
            ["checkout", "-B", "main", "abc123"],
        ]
        assert mock_run.call_args_list[0][1]["timeout"] == NETWORK_TIMEOUT

    def test_without_sha_uses_remote_branch(self, tmp_path: Path) -> None:
        (tmp_path / ".git").mkdir()
        with patch("reltagger.services.git.checkout._run_git") as mock_run:
            checkout_repository("main", repo_dir=tmp_path)
        assert mock_run.call_args_list[-1][0][0] == ["checkout", "-B", "main", "origin/main"]

    def test_clones_when_not_a_working_copy(self, tmp_path: Path) -> None:
        target = tmp_path / "work"
        with patch("reltagger.services.git.checkout._run_git") as mock_run:
            checkout_repository("main", repo_dir=target, clone_url="https://github.com/o/r.git", sha="abc")
        assert target.is_dir()
        assert mock_run.call_args_list[0][0][0] == ["clone", "https://github.com/o/r.git", "."]
        assert mock_run.call_args_list[0][1]["cwd"] == target
        assert mock_run.call_count == 3

    def test_no_working_copy_and_no_url_raises(self, tmp_path: Path) -> None:
        with patch("reltagger.services.git.checkout._run_git") as mock_run:
            with pytest.raises(GitRunnerError, match="not a git working copy"):
                checkout_repository("main", repo_dir=tmp_path)
        mock_run.assert_not_called()

    def test_fetch_failure_propagates(self, tmp_path: Path) -> None:
        (tmp_path / ".git").mkdir()
        with patch("reltagger.services.git.checkout._run_git", side_effect=GitRunnerError("fetch failed")):
            with pytest.raises(GitRunnerError):
                checkout_repository("main", repo_dir=tmp_path)

    def test_is_working_copy(self, tmp_path: Path) -> None:
        assert is_working_copy(tmp_path) is False
        (tmp_path / ".git").write_text("gitdir: ../elsewhere\n")
        assert is_working_copy(tmp_path) is True


class TestIdentityAndTags:
    """configure_identity, create_annotated_tag, push_tag command lines."""

    def test_configure_identity_sets_local_email_and_name(self) -> None:
        with patch("reltagger.services.git.identity._run_git") as mock_run:
            configure_identity(
                "github-actions[bot]",
                "github-actions[bot]@users.noreply.github.com",
                repo_dir=Path("/tmp/repo"),
            )
        assert [c[0][0] for c in mock_run.call_args_list] == [
            ["config", "--local", "user.email", "github-actions[bot]@users.noreply.github.com"],
            ["config", "--local", "user.name", "github-actions[bot]"],
        ]

    def test_create_annotated_tag(self) -> None:
        with patch("reltagger.services.git.tags._run_git") as mock_run:
            create_annotated_tag("v1.2.3", "Release v1.2.3", repo_dir=Path("/tmp/repo"), log=None)
        mock_run.assert_called_once_with(
            ["tag", "-a", "-m", "Release v1.2.3", "--", "v1.2.3"], cwd=Path("/tmp/repo"), log=None
        )

    def test_push_tag_to_origin(self) -> None:
        with patch("reltagger.services.git.tags._run_git") as mock_run:
            push_tag("v1.2.3", repo_dir=Path("/tmp/repo"), log=None)
        mock_run.assert_called_once_with(
            ["push", "origin", "refs/tags/v1.2.3"], cwd=Path("/tmp/repo"), log=None, timeout=NETWORK_TIMEOUT
        )

    def test_option_like_name_stays_an_argument(self) -> None:
        with patch("reltagger.services.git.tags._run_git") as mock_run:
            create_annotated_tag("--force", "Release --force", repo_dir=Path("/tmp/repo"))
            push_tag("--force", repo_dir=Path("/tmp/repo"))
        tag_args, push_args = (c[0][0] for c in mock_run.call_args_list)
        assert tag_args[-2:] == ["--", "--force"]
        assert push_args == ["push", "origin", "refs/tags/--force"]

    def test_tag_uses_cwd_when_no_repo_dir(self) -> None:
        with patch("reltagger.services.git.tags._run_git") as mock_run:
            create_annotated_tag("2.0.0", "Release 2.0.0")
        assert mock_run.call_args[1]["cwd"] == Path.cwd()


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
class TestTagsWithRealGit:
    """Annotated tag pushed to a local bare remote."""

    def _git(self, cwd: Path, *args: str) -> str:
        return subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True, text=True).stdout

    @pytest.fixture
    def repo(self, tmp_path: Path) -> Path:
        remote = tmp_path / "remote.git"
        work = tmp_path / "work"
        remote.mkdir()
        work.mkdir()
        self._git(remote, "init", "--bare")
        self._git(work, "init")
        configure_identity("github-actions[bot]", "github-actions[bot]@users.noreply.github.com", repo_dir=work)
        (work / "Cargo.toml").write_text('[package]\nname = "demo"\nversion = "2.0.0"\n')
        self._git(work, "add", "Cargo.toml")
        self._git(work, "commit", "-m", "chore: release")
        self._git(work, "remote", "add", "origin", str(remote))
        return work

    def test_tag_is_annotated_and_pushed(self, repo: Path) -> None:
        create_annotated_tag("2.0.0", "Release 2.0.0", repo_dir=repo)
        push_tag("2.0.0", repo_dir=repo)
        assert self._git(repo, "cat-file", "-t", "2.0.0").strip() == "tag"
        assert self._git(repo, "tag", "-l", "--format=%(contents:subject)", "2.0.0").strip() == "Release 2.0.0"
        remote_tags = self._git(repo, "ls-remote", "--tags", "origin")
        assert "refs/tags/2.0.0" in remote_tags

    def test_tag_pushed_when_branch_has_same_name(self, repo: Path) -> None:
        self._git(repo, "branch", "2.0.0")
        create_annotated_tag("2.0.0", "Release 2.0.0", repo_dir=repo)
        push_tag("2.0.0", repo_dir=repo)
        remote_refs = self._git(repo, "ls-remote", "origin")
        assert "refs/tags/2.0.0" in remote_refs
        assert "refs/heads/2.0.0" not in remote_refs

    def test_option_like_name_is_rejected_by_git(self, repo: Path) -> None:
        with pytest.raises(GitRunnerError):
            create_annotated_tag("--force", "Release --force", repo_dir=repo)
        assert self._git(repo, "tag", "-l").strip() == ""

    def test_existing_tag_is_not_overwritten(self, repo: Path) -> None:
        create_annotated_tag("2.0.0", "Release 2.0.0", repo_dir=repo)
        with pytest.raises(GitRunnerError):
            create_annotated_tag("2.0.0", "Release 2.0.0", repo_dir=repo)

    def test_identity_written_to_local_config(self, repo: Path) -> None:
        assert self._git(repo, "config", "--local", "user.name").strip() == "github-actions[bot]"
