"""Shared fixtures: config and pull_request payloads."""

from typing import Any, Dict

import pytest

from reltagger.config import AppConfig, BotConfig, CacheConfig


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    """Config for owner/crate with the cache stored under tmp_path."""
    return AppConfig(
        bot=BotConfig(repository="owner/crate", workspace=str(tmp_path / "work")),
        cache=CacheConfig(dir=str(tmp_path / "cache")),
    )


def _make_payload(
    title: str = "release: v1.2.3",
    head_ref: str = "release-pr/1.2.3",
    base_ref: str = "main",
    merged: bool = True,
    action: str = "closed",
    repo: str = "owner/crate",
) -> Dict[str, Any]:
    """Minimal GitHub pull_request webhook payload."""
    return {
        "action": action,
        "number": 7,
        "pull_request": {
            "number": 7,
            "title": title,
            "merged": merged,
            "merge_commit_sha": "abc123",
            "head": {"ref": head_ref},
            "base": {"ref": base_ref},
        },
        "repository": {
            "full_name": repo,
            "clone_url": f"https://github.com/{repo}.git",
        },
    }


@pytest.fixture
def make_payload():
    """Factory for pull_request webhook payloads."""
    return _make_payload
