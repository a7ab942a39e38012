"""Committer identity for the working copy."""

import logging
from pathlib import Path

from reltagger.services.git._run import _run_git


def configure_identity(
    bot_name: str,
    bot_email: str,
    repo_dir: Path | None = None,
    log: logging.Logger | None = None,
) -> None:
    """Set user.email and user.name in the working copy's local git config.

    Pass bot_name and bot_email from config (config.bot.name, config.bot.email).
    """
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    _run_git(["config", "--local", "user.email", bot_email], cwd=cwd, log=log)
    _run_git(["config", "--local", "user.name", bot_name], cwd=cwd, log=log)
    if log:
        log.info("Git identity set to %s <%s>", bot_name, bot_email)
