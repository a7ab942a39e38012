"""Pull request event model (Pydantic)."""

from typing import Any, Dict

from pydantic import BaseModel


class PullRequestEvent(BaseModel):
    """A pull_request event as seen by the release tagger.

    Produced by the webhook payload or the GitHub API; consumed once per
    invocation and never persisted.
    """

    action: str
    number: int | None = None
    title: str = ""
    head_ref: str = ""
    base_ref: str = ""
    merged: bool = False
    repository: str = ""
    clone_url: str | None = None
    merge_commit_sha: str | None = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "PullRequestEvent":
        """Build from a GitHub pull_request webhook payload."""
        pull = payload.get("pull_request") or {}
        head = pull.get("head") or {}
        base = pull.get("base") or {}
        repo = payload.get("repository") or {}
        number = pull.get("number", payload.get("number"))
        return cls(
            action=payload.get("action") or "",
            number=int(number) if number is not None else None,
            title=pull.get("title") or "",
            head_ref=head.get("ref") or "",
            base_ref=base.get("ref") or "",
            merged=pull.get("merged") is True,
            repository=repo.get("full_name") or "",
            clone_url=repo.get("clone_url"),
            merge_commit_sha=pull.get("merge_commit_sha"),
        )
