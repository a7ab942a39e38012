"""Handle GitHub webhook events.

Only pull_request events matter: a merged release-pr/ pull request into the
default branch runs the release tagger. Everything else is ignored.
"""

import logging
import threading
from pathlib import Path
from typing import Any, Dict

from reltagger.models import PullRequestEvent
from reltagger.release import ReleaseResult, ReleaseTagger

# One working copy per daemon: runs against it must not interleave
_RUN_LOCK = threading.Lock()


def _handle_pull_request(
    config: Any,
    payload: Dict[str, Any],
    repo_dir: Path | None,
    log: logging.Logger,
) -> ReleaseResult | None:
    """On pull_request: check repository, then run the tagger (guarded)."""
    event = PullRequestEvent.from_payload(payload)
    configured = getattr(config.bot, "repository", "")
    if event.repository and event.repository != configured:
        log.debug("Skipping pull_request: repository %s is not configured repo", event.repository)
        return None
    if event.action != "closed":
        log.debug("Skipping pull_request action %s for PR #%s", event.action, event.number)
        return None
    with _RUN_LOCK:
        return ReleaseTagger(config, repo_dir=repo_dir, log=log).run(event)


def handle_github_event(
    config: Any,
    event: str,
    payload: Dict[str, Any],
    repo_dir: Path | None = None,
    log: logging.Logger | None = None,
) -> ReleaseResult | None:
    """Handle a GitHub webhook event.

    Supported events:
    - ping: logged, nothing else.
    - pull_request (action=closed): run the release tagger; the tagger's
      guard decides whether a release happens.

    Returns the tagger result, or None when the event was ignored.

    Raises:
        ReleaseError: If a release step fails.
    """
    logger = log or logging.getLogger("reltagger.webhook.handlers")

    if event == "ping":
        logger.info("Webhook ping: %s", payload.get("zen", ""))
        return None

    if event == "pull_request":
        return _handle_pull_request(config, payload, repo_dir, logger)

    logger.debug("Ignoring event %s", event)
    return None
