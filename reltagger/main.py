"""Reltagger entry point.

Three modes:
- daemon: webhook server, releases on merged release-pr/ pull requests.
- run: one-shot for CI; reads the pull_request event from --event or
  GITHUB_EVENT_PATH and writes VERSION to GITHUB_OUTPUT.
- replay: fetch a pull request from the GitHub API and run the release for it.

Usage: reltagger daemon | reltagger run [--event PATH] | reltagger replay --pr N
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from reltagger.adapters import GitHubAdapter, GitPlatformError
from reltagger.config import AppConfig, load_config
from reltagger.logging import ReltaggerLogging
from reltagger.models import PullRequestEvent
from reltagger.release import ReleaseError, ReleaseResult, ReleaseTagger

SUBCOMMANDS = ("daemon", "run", "replay")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI with optional subcommand (daemon | run | replay)."""
    argv = argv if argv is not None else sys.argv[1:]
    sub = "daemon"
    rest = list(argv)
    if argv and not argv[0].startswith("-") and argv[0] in SUBCOMMANDS:
        sub = argv[0]
        rest = argv[1:]

    parser = argparse.ArgumentParser(
        prog=f"reltagger {sub}",
        description="Reltagger - tag a release when a release-pr/ pull request is merged",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load and validate config, then exit",
    )
    parser.add_argument(
        "--repo-dir",
        type=Path,
        default=None,
        help="Working copy to release from (default: bot.workspace)",
    )
    if sub == "run":
        parser.add_argument(
            "--event",
            type=Path,
            default=None,
            help="pull_request event JSON (default: $GITHUB_EVENT_PATH)",
        )
    if sub == "replay":
        parser.add_argument("--pr", type=int, required=True, help="Pull request number")
    parsed = parser.parse_args(rest)
    parsed.subcommand = sub
    return parsed


def _load_event(path: Path | None) -> PullRequestEvent:
    """Read the pull_request event from path or $GITHUB_EVENT_PATH."""
    event_path = path or (Path(os.environ["GITHUB_EVENT_PATH"]) if os.environ.get("GITHUB_EVENT_PATH") else None)
    if event_path is None:
        raise ValueError("no event file: pass --event or set GITHUB_EVENT_PATH")
    event_name = os.environ.get("GITHUB_EVENT_NAME")
    if event_name and event_name != "pull_request":
        raise ValueError(f"event {event_name!r} is not pull_request")
    payload = json.loads(event_path.read_text(encoding="utf-8"))
    return PullRequestEvent.from_payload(payload)


def _report(result: ReleaseResult) -> None:
    log = logging.getLogger("reltagger")
    if result.triggered:
        log.info("Release %s tagged and pushed", result.version)
    else:
        log.info("No release: %s", result.reason)


def run_once(config: AppConfig, event: PullRequestEvent, repo_dir: Path | None = None) -> ReleaseResult:
    """Run the tagger for a single event, writing VERSION to GITHUB_OUTPUT
    when set."""
    tagger = ReleaseTagger(
        config,
        repo_dir=repo_dir,
        log=logging.getLogger("reltagger.release"),
        output_path=os.environ.get("GITHUB_OUTPUT") or None,
    )
    return tagger.run(event)


def replay(config: AppConfig, pr_number: int, repo_dir: Path | None = None) -> ReleaseResult:
    """Fetch pull request pr_number and run the tagger for it."""
    adapter = GitHubAdapter(token=config.github_token_resolved, api_url=config.github.api_url)
    event = adapter.get_pull_request(config.bot.repository, pr_number)
    return ReleaseTagger(config, repo_dir=repo_dir, log=logging.getLogger("reltagger.release")).run(event)


def main(argv: list[str] | None = None) -> int:
    """Entry point: dispatch to daemon, run or replay."""
    args = parse_args(argv)

    config_path = args.config
    if not config_path.is_file() and config_path == Path("config.yaml"):
        if Path("config.example.yaml").is_file():
            config_path = Path("config.example.yaml")
            logging.basicConfig(level=logging.INFO)
            logging.getLogger("reltagger").warning("config.yaml not found, using config.example.yaml")

    config = load_config(config_path)

    if args.check:
        print("Config OK:", config.bot.repository, config.bot.default_branch)
        return 0

    logs = ReltaggerLogging(config.logging)
    logs.setup()
    log = logs.get_logger(args.subcommand)

    try:
        if args.subcommand == "run":
            _report(run_once(config, _load_event(args.event), repo_dir=args.repo_dir))
            return 0
        if args.subcommand == "replay":
            _report(replay(config, args.pr, repo_dir=args.repo_dir))
            return 0

        from reltagger.webhook.server import run_webhook_server

        if args.repo_dir is not None:
            config.bot.workspace = str(args.repo_dir)
        if not config.webhook.enabled:
            log.warning("Webhook disabled in config; daemon will do nothing useful.")
            return 0
        log.info(
            "Reltagger daemon started | repo=%s | branch=%s | workspace=%s",
            config.bot.repository,
            config.bot.default_branch,
            config.workspace_path,
        )
        run_webhook_server(config)
    except KeyboardInterrupt:
        return 0
    except ReleaseError as e:
        log.error("Release failed at step %s: %s", e.step, e)
        return 1
    except (ValueError, OSError, GitPlatformError) as e:
        log.error("%s", e)
        return 1
    except Exception as e:
        log.exception("Fatal error: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
