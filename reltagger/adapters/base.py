"""Abstract base for Git platform adapters."""

from abc import ABC, abstractmethod

from reltagger.models import PullRequestEvent


class GitPlatformError(Exception):
    """Raised when a platform API call fails."""

    pass


class GitPlatformAdapter(ABC):
    """Read pull requests from a Git hosting platform."""

    @abstractmethod
    def get_pull_request(self, repo: str, pr_number: int) -> PullRequestEvent:
        """Return the pull request as a closed event carrying its current
        merged flag."""
        ...
