"""Tag a release when a release-pr/ pull request is merged into main."""

__version__ = "0.1.0"
