"""Configuration loading from YAML and environment.

Secrets (tokens, webhook secret) are taken from environment variables or
from files (Docker secrets). Never put real tokens in config files committed
to the repo.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _read_secret(env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = _current_env.get(env_key)
    if value:
        return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path:
        return Path(file_path).read_text().strip()
    return None


# Injected by load_config so properties can read env/file
_current_env: dict[str, str] = {}


class BotConfig(BaseSettings):
    """Bot identity and target repo."""

    model_config = SettingsConfigDict(env_prefix="BOT_", extra="ignore")

    name: str = Field(default="github-actions[bot]", description="Git user.name for tags")
    email: str = Field(
        default="github-actions[bot]@users.noreply.github.com",
        description="Git user.email for tags",
    )
    repository: str = Field(default="owner/repo", description="Target repo e.g. owner/crate")
    default_branch: str = Field(default="main", description="Branch release PRs are merged into")
    webhook_secret: str = Field(default="", description="Secret for webhook signature verification")
    workspace: str = Field(default=".", description="Working copy used for checkout, release and tagging")


class GitHubConfig(BaseSettings):
    """GitHub API and webhook settings."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_", extra="ignore")

    token: str | None = Field(default=None, description="PAT or app token; use env or secret file")
    api_url: str = Field(default="https://api.github.com", description="API base URL")
    webhook_path: str = Field(default="/webhook/github", description="Webhook URL path")


class ReleaseConfig(BaseSettings):
    """Trigger guard, version extraction and release tool settings."""

    model_config = SettingsConfigDict(env_prefix="RELEASE_", extra="ignore")

    branch_prefix: str = Field(default="release-pr/", description="Head branch prefix of release PRs")
    title_prefix: str = Field(default="release: ", description="Literal stripped from the PR title")
    tag_message: str = Field(default="Release {version}", description="Annotated tag message template")
    remote: str = Field(default="origin", description="Remote the tag is pushed to")
    tool: str = Field(default="cargo-release", description="Crate providing the release subcommand")
    tool_version: str = Field(default="^0.25", description="Version requirement passed to cargo install")
    cargo: str = Field(default="cargo", description="Cargo executable")
    args: list[str] = Field(
        default_factory=lambda: ["--no-tag", "--no-push"],
        description="Arguments for cargo release",
    )
    # cargo release is a dry run unless --execute is passed
    execute: bool = Field(default=False, description="Append --execute to cargo release")
    timeout: int = Field(default=1800, ge=1, description="Timeout in seconds for install and release")


class CacheConfig(BaseSettings):
    """Build cache settings (best-effort, keyed by lock file hash)."""

    model_config = SettingsConfigDict(env_prefix="CACHE_", extra="ignore")

    enabled: bool = Field(default=True, description="Restore and save the build cache")
    dir: str = Field(default="~/.cache/reltagger", description="Where cache archives are stored; relative paths go under ~/.cache")
    shared_key: str = Field(default="regular", description="Fixed prefix of the cache key")
    lock_glob: str = Field(default="**/Cargo.lock", description="Lock files hashed into the key")
    paths: list[str] = Field(
        default_factory=lambda: ["target"],
        description="Directories to cache, relative to the working copy",
    )


class WebhookConfig(BaseSettings):
    """Webhook server settings."""

    model_config = SettingsConfigDict(env_prefix="WEBHOOK_", extra="ignore")

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8000, ge=1, le=65535, description="Bind port")
    enabled: bool = Field(default=True, description="Enable webhook server")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )
    commands: str = Field(
        default="",
        description="Level for git/cargo output loggers (empty: same as level)",
    )


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    bot: BotConfig = Field(default_factory=BotConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    release: ReleaseConfig = Field(default_factory=ReleaseConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    webhook: WebhookConfig = Field(default_factory=WebhookConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def github_token_resolved(self) -> str | None:
        """Resolve GitHub token from env or Docker secret file."""
        t = self.github.token
        if t and not t.startswith("${"):
            return t
        return _read_secret("GITHUB_TOKEN", "GITHUB_TOKEN_FILE")

    @property
    def webhook_secret_resolved(self) -> str:
        """Resolve webhook secret from env or Docker secret file."""
        s = self.bot.webhook_secret
        if s and not s.startswith("${") and s != "your-webhook-secret-here":
            return s
        return _read_secret("WEBHOOK_SECRET", "WEBHOOK_SECRET_FILE") or ""

    @property
    def workspace_path(self) -> Path:
        """Working copy directory, resolved."""
        return Path(self.bot.workspace or ".").resolve()


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    Secrets: GITHUB_TOKEN or GITHUB_TOKEN_FILE, WEBHOOK_SECRET or WEBHOOK_SECRET_FILE.
    """
    global _current_env
    import os

    _current_env = dict(os.environ)

    path = config_path or Path("config.yaml")
    if not path.is_file():
        return AppConfig()

    raw = yaml.safe_load(path.read_text()) or {}
    raw = _substitute_env(raw)

    # Env overrides for nested values (e.g. BOT_REPOSITORY)
    bot_raw = raw.get("bot") or {}
    if _current_env.get("BOT_REPOSITORY"):
        bot_raw = {**bot_raw, "repository": _current_env.get("BOT_REPOSITORY")}

    return AppConfig(
        bot=BotConfig(**bot_raw),
        github=GitHubConfig(**(raw.get("github") or {})),
        release=ReleaseConfig(**(raw.get("release") or {})),
        cache=CacheConfig(**(raw.get("cache") or {})),
        webhook=WebhookConfig(**(raw.get("webhook") or {})),
        logging=LoggingConfig(**(raw.get("logging") or {})),
    )
