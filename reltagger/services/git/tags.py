"""Create annotated tags and push them to a remote."""

import logging
from pathlib import Path

from reltagger.services.git._run import NETWORK_TIMEOUT, _run_git


def create_annotated_tag(
    tag: str,
    message: str,
    repo_dir: Path | None = None,
    log: logging.Logger | None = None,
) -> None:
    """Create an annotated tag at HEAD.

    The tag name is used as given (it comes from the PR title). An existing
    tag is never overwritten: git refuses and GitRunnerError is raised.

    Args:
        tag: Tag name (e.g. v1.2.3).
        message: Tag message (e.g. "Release v1.2.3").
        repo_dir: Repository directory; uses cwd if None.
        log: Optional logger.
    """
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    # "--" keeps a name like "--force" from being read as an option
    _run_git(["tag", "-a", "-m", message, "--", tag], cwd=cwd, log=log)
    if log:
        log.info("Created tag %s", tag)


def push_tag(
    tag: str,
    remote: str = "origin",
    repo_dir: Path | None = None,
    log: logging.Logger | None = None,
) -> None:
    """Push a single tag to remote; a rejected push raises GitRunnerError.

    The full refs/tags/<tag> refspec is pushed, so the name can never be
    taken for an option or for a branch of the same name.
    """
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    _run_git(["push", remote, f"refs/tags/{tag}"], cwd=cwd, log=log, timeout=NETWORK_TIMEOUT)
    if log:
        log.info("Pushed tag %s to %s", tag, remote)
