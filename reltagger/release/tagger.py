"""Release tagger: guard a merged release PR, run the release tool, tag and
push.

Steps run strictly in order and stop at the first failure:

1. checkout   - working copy at the merge commit on the default branch
2. cache      - best-effort restore keyed by the lock file hash
3. install    - release tool at the pinned version
4. release    - cargo release with tagging and push suppressed
5. version    - PR title with the release prefix stripped
6. identity   - bot user.name / user.email in local git config
7. tag        - annotated tag "<version>" pushed to the remote

Cache problems are logged and never abort the run.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from pydantic import BaseModel

from reltagger.config import AppConfig
from reltagger.models import PullRequestEvent
from reltagger.release.guard import should_release
from reltagger.release.version import extract_version, write_step_output
from reltagger.services.cache import BuildCache
from reltagger.services.git import (
    GitRunnerError,
    checkout_repository,
    configure_identity,
    create_annotated_tag,
    push_tag,
)
from reltagger.services.tools import ToolError, install_tool, run_release


class ReleaseError(Exception):
    """Raised when a release step fails; later steps are not run."""

    def __init__(self, step: str, message: str) -> None:
        super().__init__(f"{step}: {message}")
        self.step = step


class ReleaseResult(BaseModel):
    """Outcome of one tagger invocation."""

    triggered: bool
    reason: str = ""
    version: str | None = None
    tag: str | None = None
    pushed: bool = False
    cache_hit: bool = False


class ReleaseTagger:
    """Run the release sequence for one pull_request event."""

    def __init__(
        self,
        config: AppConfig,
        repo_dir: Path | None = None,
        log: logging.Logger | None = None,
        output_path: Path | str | None = None,
    ) -> None:
        self._config = config
        self._repo_dir = Path(repo_dir) if repo_dir is not None else config.workspace_path
        self._log = log or logging.getLogger("reltagger.release.tagger")
        self._output_path = output_path

    def run(self, event: PullRequestEvent) -> ReleaseResult:
        """Run all steps for event, or skip when the guard rejects it.

        Raises:
            ReleaseError: If checkout, install, release, identity or tag
                step fails.
        """
        release_cfg = self._config.release
        decision = should_release(
            event,
            default_branch=self._config.bot.default_branch,
            branch_prefix=release_cfg.branch_prefix,
        )
        if not decision:
            self._log.info("Skipping PR #%s: %s", event.number, decision.reason)
            return ReleaseResult(triggered=False, reason=decision.reason)

        log = self._log
        repo_dir = self._repo_dir
        log.info("Release PR #%s merged (%s), starting release in %s", event.number, event.head_ref, repo_dir)

        with _step("checkout"):
            checkout_repository(
                self._config.bot.default_branch,
                repo_dir=repo_dir,
                clone_url=event.clone_url,
                sha=event.merge_commit_sha,
                log=log,
            )

        cache = BuildCache(self._config.cache, repo_dir, log=log)
        cache_hit = cache.restore()

        with _step("install"):
            install_tool(
                release_cfg.tool,
                release_cfg.tool_version,
                cargo=release_cfg.cargo,
                repo_dir=repo_dir,
                timeout=release_cfg.timeout,
                log=log,
            )

        with _step("release"):
            run_release(
                release_cfg.args,
                execute=release_cfg.execute,
                cargo=release_cfg.cargo,
                repo_dir=repo_dir,
                timeout=release_cfg.timeout,
                log=log,
            )

        version = extract_version(event.title, release_cfg.title_prefix)
        log.info("Version is %s", version)
        if self._output_path:
            with _step("version"):
                write_step_output("VERSION", version, self._output_path)

        with _step("identity"):
            configure_identity(self._config.bot.name, self._config.bot.email, repo_dir=repo_dir, log=log)

        with _step("tag"):
            create_annotated_tag(version, release_cfg.tag_message.format(version=version), repo_dir=repo_dir, log=log)
            push_tag(version, remote=release_cfg.remote, repo_dir=repo_dir, log=log)

        if not cache_hit:
            cache.save()

        return ReleaseResult(triggered=True, version=version, tag=version, pushed=True, cache_hit=cache_hit)


@contextmanager
def _step(name: str) -> Iterator[None]:
    """Turn a step's git, tool or IO error into ReleaseError."""
    try:
        yield
    except (GitRunnerError, ToolError, OSError) as e:
        raise ReleaseError(name, str(e)) from e
