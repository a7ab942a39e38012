"""Trigger guard: decide whether a pull_request event starts a release."""

from pydantic import BaseModel

from reltagger.models import PullRequestEvent


class GuardDecision(BaseModel):
    """Outcome of the trigger guard; truthy when the release should run."""

    accepted: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.accepted


def should_release(
    event: PullRequestEvent,
    default_branch: str = "main",
    branch_prefix: str = "release-pr/",
) -> GuardDecision:
    """Accept only a release-pr/ branch merged (not merely closed) into
    default_branch."""
    if event.action != "closed":
        return GuardDecision(accepted=False, reason=f"action is {event.action!r}, not 'closed'")
    if event.base_ref != default_branch:
        return GuardDecision(accepted=False, reason=f"base branch {event.base_ref!r} is not {default_branch!r}")
    if not event.head_ref.startswith(branch_prefix):
        return GuardDecision(accepted=False, reason=f"head branch {event.head_ref!r} does not start with {branch_prefix!r}")
    if not event.merged:
        return GuardDecision(accepted=False, reason="pull request was closed without merge")
    return GuardDecision(accepted=True)
