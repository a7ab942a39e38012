"""Install and run the release tool (cargo-release)."""

import logging
import subprocess
from pathlib import Path

from reltagger.logging import command_logger


class ToolError(Exception):
    """Raised when installing or running the release tool fails."""

    pass


def _run_cargo(
    cargo: str,
    args: list[str],
    cwd: Path,
    timeout: int,
    log: logging.Logger | None = None,
) -> str:
    """Run cargo with args; raise ToolError on non-zero exit."""
    cmd = [cargo] + args
    try:
        result = subprocess.run(cmd, cwd=cwd, check=True, capture_output=True, text=True, timeout=timeout)
    except subprocess.CalledProcessError as e:
        err = (e.stderr or e.stdout or "").strip()
        if log:
            log.warning("%s %s failed: %s", cargo, args, err)
        raise ToolError(f"{cargo} {' '.join(args)}: {err}") from e
    except subprocess.TimeoutExpired as e:
        raise ToolError(f"{cargo} {' '.join(args)}: timed out after {timeout}s") from e
    except FileNotFoundError as e:
        raise ToolError(f"{cargo} not found") from e
    if result.stderr:
        # cargo reports progress on stderr
        command_logger("cargo").debug("%s %s: %s", cargo, args[0], result.stderr.strip())
    return result.stdout


def install_tool(
    tool: str,
    version: str,
    cargo: str = "cargo",
    repo_dir: Path | None = None,
    timeout: int = 1800,
    log: logging.Logger | None = None,
) -> None:
    """Install tool with cargo install at the given version requirement.

    cargo skips the build when a matching version is already installed.
    """
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    _run_cargo(cargo, ["install", tool, "--locked", "--version", version], cwd=cwd, timeout=timeout, log=log)
    if log:
        log.info("Installed %s %s", tool, version)


def release_command(args: list[str], execute: bool = False) -> list[str]:
    """Cargo arguments for a release run: release <args> [--execute]."""
    cmd = ["release"] + list(args)
    if execute and "--execute" not in cmd:
        cmd.append("--execute")
    return cmd


def run_release(
    args: list[str],
    execute: bool = False,
    cargo: str = "cargo",
    repo_dir: Path | None = None,
    timeout: int = 1800,
    log: logging.Logger | None = None,
) -> str:
    """Run cargo release in repo_dir and return its stdout.

    Tag creation and push are expected to be suppressed via args
    (--no-tag --no-push); tagging is done afterwards by the tagger.
    """
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    cmd = release_command(args, execute=execute)
    out = _run_cargo(cargo, cmd, cwd=cwd, timeout=timeout, log=log)
    if log:
        log.info("Ran %s %s", cargo, " ".join(cmd))
    return out
