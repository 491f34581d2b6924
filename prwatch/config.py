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


# Injected by load_config so secret resolution can read env/file
_current_env: dict[str, str] = {}


class GitHubConfig(BaseSettings):
    """GitHub API settings."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_", extra="ignore")

    token: str | None = Field(default=None, description="PAT or app token; use env or secret file")
    api_url: str = Field(default="https://api.github.com", description="API base URL")
    server_url: str = Field(default="https://github.com", description="Web URL of the hosting server")


class TriggerConfig(BaseSettings):
    """Monitored repositories and who may request builds."""

    model_config = SettingsConfigDict(env_prefix="TRIGGER_", extra="ignore")

    repositories: list[str] = Field(default_factory=list, description="Monitored repos, e.g. owner/repo")
    admins: list[str] = Field(default_factory=list, description="Logins allowed to grant builds")
    whitelist: list[str] = Field(default_factory=list, description="Logins whose PRs build automatically")
    whitelist_phrase: str = Field(default=r".*add\W+to\W+whitelist.*", description="Regex: add author to whitelist")
    ok_to_test_phrase: str = Field(default=r".*ok\W+to\W+test.*", description="Regex: accept PR for testing")
    retest_phrase: str = Field(default=r".*test\W+this\W+please.*", description="Regex: run the build again")
    request_for_testing_phrase: str = Field(
        default="Can one of the admins verify this patch?",
        description="Comment posted on PRs from authors not in whitelist",
    )
    use_comments: bool = Field(default=False, description="Post a comment when commit status cannot be set")
    hook_url: str | None = Field(default=None, description="Public URL of the webhook endpoint to register")
    verify_hook_ssl: bool = Field(default=True, description="Ask GitHub to verify the hook URL certificate")


class BuildConfig(BaseSettings):
    """Build executor settings."""

    model_config = SettingsConfigDict(env_prefix="BUILD_", extra="ignore")

    command: list[str] | None = Field(default=None, description="Command started for each build (no shell)")
    working_directory: str = Field(default=".", description="CWD for the build command")


class WebhookConfig(BaseSettings):
    """Webhook server settings."""

    model_config = SettingsConfigDict(env_prefix="WEBHOOK_", extra="ignore")

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8000, ge=1, le=65535, description="Bind port")
    path: str = Field(default="/webhook/github", description="Webhook URL path")
    enabled: bool = Field(default=True, description="Enable webhook server")
    secret: str = Field(default="", description="Secret for webhook signature verification")


class SchedulerConfig(BaseSettings):
    """Scheduler (polling) settings."""

    model_config = SettingsConfigDict(env_prefix="SCHEDULER_", extra="ignore")

    enabled: bool = Field(default=True, description="Poll open pull requests periodically")
    interval_seconds: int = Field(default=300, ge=30, description="Poll interval in seconds")


class StoreConfig(BaseSettings):
    """Tracked state persistence."""

    model_config = SettingsConfigDict(env_prefix="STORE_", extra="ignore")

    state_dir: str = Field(default=".prwatch/state", description="Directory for per-repository YAML state")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    trigger: TriggerConfig = Field(default_factory=TriggerConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    webhook: WebhookConfig = Field(default_factory=WebhookConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def github_token_resolved(self) -> str | None:
        """Resolve GitHub token from config, env or Docker secret file."""
        t = self.github.token
        if t and not t.startswith("${"):
            return t
        return _read_secret("GITHUB_TOKEN", "GITHUB_TOKEN_FILE")

    @property
    def webhook_secret_resolved(self) -> str:
        """Resolve webhook secret from config, env or Docker secret file."""
        s = self.webhook.secret
        if s and not s.startswith("${"):
            return s
        return _read_secret("WEBHOOK_SECRET", "WEBHOOK_SECRET_FILE") or ""


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
    raw: dict[str, Any] = {}
    if path.is_file():
        raw = yaml.safe_load(path.read_text()) or {}
        raw = _substitute_env(raw)

    # Comma-separated override, e.g. PRWATCH_REPOSITORIES=owner/a,owner/b
    trigger_raw = raw.get("trigger") or {}
    if _current_env.get("PRWATCH_REPOSITORIES"):
        repos = [r.strip() for r in _current_env["PRWATCH_REPOSITORIES"].split(",") if r.strip()]
        trigger_raw = {**trigger_raw, "repositories": repos}

    return AppConfig(
        github=GitHubConfig(**(raw.get("github") or {})),
        trigger=TriggerConfig(**trigger_raw),
        build=BuildConfig(**(raw.get("build") or {})),
        webhook=WebhookConfig(**(raw.get("webhook") or {})),
        scheduler=SchedulerConfig(**(raw.get("scheduler") or {})),
        store=StoreConfig(**(raw.get("store") or {})),
        logging=LoggingConfig(**(raw.get("logging") or {})),
    )
