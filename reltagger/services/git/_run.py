"""Internal helpers: run git commands, GitRunnerError."""

import logging
import subprocess
from pathlib import Path

from reltagger.logging import command_logger

DEFAULT_TIMEOUT = 60
NETWORK_TIMEOUT = 300


class GitRunnerError(Exception):
    """Raised when a git command fails."""

    pass


def _run_git(
    args: list[str],
    cwd: Path,
    log: logging.Logger | None = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> str:
    """Run git command and return stdout; raise GitRunnerError on non-zero
    exit."""
    cmd = ["git"] + args
    try:
        result = subprocess.run(cmd, cwd=cwd, check=True, capture_output=True, text=True, timeout=timeout)
    except subprocess.CalledProcessError as e:
        err = (e.stderr or e.stdout or "").strip()
        if log:
            log.warning("Git %s failed: %s", args, err)
        raise GitRunnerError(f"git {' '.join(args)}: {err}") from e
    except subprocess.TimeoutExpired as e:
        raise GitRunnerError(f"git {' '.join(args)}: timed out after {timeout}s") from e
    except FileNotFoundError as e:
        raise GitRunnerError("git not found") from e
    if result.stdout:
        command_logger("git").debug("git %s: %s", " ".join(args), result.stdout.strip())
    return result.stdout
