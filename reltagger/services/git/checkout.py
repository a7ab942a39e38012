"""Clone or update the working copy and check out the merge commit."""

import logging
from pathlib import Path

from reltagger.services.git._run import NETWORK_TIMEOUT, GitRunnerError, _run_git


def is_working_copy(repo_dir: Path) -> bool:
    """True if repo_dir holds a git working copy (.git dir or file)."""
    return (Path(repo_dir) / ".git").exists()


def checkout_repository(
    base_branch: str,
    repo_dir: Path | None = None,
    clone_url: str | None = None,
    sha: str | None = None,
    log: logging.Logger | None = None,
) -> None:
    """Bring repo_dir to base_branch at the merge commit.

    Clones clone_url first when repo_dir is not a working copy. Fetches
    origin/<base_branch> with full history (tags included) and resets the
    local base_branch to sha, or to origin/<base_branch> when sha is None.

    Raises:
        GitRunnerError: If clone, fetch or checkout fails, or repo_dir is
            not a working copy and no clone_url is given.
    """
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    if not is_working_copy(cwd):
        if not clone_url:
            raise GitRunnerError(f"{cwd} is not a git working copy and no clone URL is known")
        cwd.mkdir(parents=True, exist_ok=True)
        _run_git(["clone", clone_url, "."], cwd=cwd, log=log, timeout=NETWORK_TIMEOUT)
        if log:
            log.info("Cloned %s into %s", clone_url, cwd)
    _run_git(["fetch", "--tags", "origin", base_branch], cwd=cwd, log=log, timeout=NETWORK_TIMEOUT)
    target = sha or f"origin/{base_branch}"
    _run_git(["checkout", "-B", base_branch, target], cwd=cwd, log=log)
    if log:
        log.info("Checked out %s at %s", base_branch, target)
