"""Git platform adapters."""

from reltagger.adapters.base import GitPlatformAdapter, GitPlatformError
from reltagger.adapters.github import GitHubAdapter

__all__ = ["GitHubAdapter", "GitPlatformAdapter", "GitPlatformError"]
