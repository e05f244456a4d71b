"""Configuration loading from YAML and environment.

Secrets (tokens) are taken from environment variables or from files
(Docker secrets). Never put real tokens in config files committed to the
repo. In GitHub Actions, GITHUB_REPOSITORY and GITHUB_API_URL are set by
the runner and picked up as github.repository and github.api_url.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""

    pass


def _read_secret(env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = _current_env.get(env_key)
    if value:
        return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path:
        try:
            return Path(file_path).read_text().strip()
        except OSError as e:
            raise ConfigError(f"Cannot read {file_env_key} {file_path!r}: {e}") from e
    return None


# Injected by load_config so validators can read env/file
_current_env: dict[str, str] = {}


def parse_excluded_repos(value: str | None) -> frozenset[str]:
    """Split a comma-separated list of owner/name entries.

    Entries are whitespace-trimmed; empty entries are dropped.
    """
    if not value:
        return frozenset()
    return frozenset(item.strip() for item in value.split(",") if item.strip())


class GitHubConfig(BaseSettings):
    """GitHub API settings and target repository."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_", extra="ignore")

    token: str | None = Field(default=None, description="PAT or workflow token; use env or secret file")
    api_url: str = Field(default="https://api.github.com", description="API base URL")
    repository: str | None = Field(default=None, description="Target repo e.g. octo/widgets")


class ForkStatusConfig(BaseSettings):
    """Fork status branch, file and pull request settings."""

    model_config = SettingsConfigDict(env_prefix="FORKWATCH_", extra="ignore")

    excluded_repos: str = Field(
        default="",
        description="Comma-separated owner/name list of forks to treat as not forked",
    )
    branch_name: str = Field(default="update-fork-status-2", description="Branch carrying the status file")
    status_file: str = Field(default=".upstream", description="Path of the tracked status file")
    target_branch: str = Field(default="main", description="Base branch of the status pull request")
    commit_message: str = Field(default="Update fork status", description="Commit message for the status file")
    pr_title: str = Field(default="Update fork status", description="Status pull request title")
    pr_body: str = Field(default="Automatically updating fork status", description="Status pull request body")

    @property
    def excluded_set(self) -> frozenset[str]:
        return parse_excluded_repos(self.excluded_repos)


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
    fork_status: ForkStatusConfig = Field(default_factory=ForkStatusConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def github_token_resolved(self) -> str | None:
        """Resolve GitHub token from config, env or Docker secret file."""
        t = self.github.token
        if t and not t.startswith("${"):
            return t
        return _read_secret("GITHUB_TOKEN", "GITHUB_TOKEN_FILE")

    def require_token(self) -> str:
        """Return the GitHub token or raise ConfigError."""
        token = self.github_token_resolved
        if not token:
            raise ConfigError("GitHub token is required (github.token, GITHUB_TOKEN or GITHUB_TOKEN_FILE)")
        return token


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


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Config section {name!r} must be a mapping, got {type(value).__name__}")
    return value


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    Without config_path only the environment is read; a config_path that
    does not exist yields defaults plus environment. Environment overrides
    YAML for the target repository and the exclusion list (they are action
    inputs that change per workflow).

    Raises:
        ConfigError: If the file is not valid YAML, is not a mapping, or
            holds values the settings models reject.
    """
    global _current_env
    import os

    _current_env = dict(os.environ)

    try:
        if config_path is None or not config_path.is_file():
            return AppConfig()

        try:
            raw = yaml.safe_load(config_path.read_text()) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot load {config_path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"{config_path} must contain a mapping, got {type(raw).__name__}")
        raw = _substitute_env(raw)

        github_raw = _section(raw, "github")
        if _current_env.get("GITHUB_REPOSITORY"):
            github_raw = {**github_raw, "repository": _current_env.get("GITHUB_REPOSITORY")}

        fork_status_raw = _section(raw, "fork_status")
        excluded = fork_status_raw.get("excluded_repos")
        if isinstance(excluded, list):
            fork_status_raw = {**fork_status_raw, "excluded_repos": ",".join(str(e) for e in excluded)}
        if _current_env.get("FORKWATCH_EXCLUDED_REPOS"):
            fork_status_raw = {**fork_status_raw, "excluded_repos": _current_env.get("FORKWATCH_EXCLUDED_REPOS")}

        github = GitHubConfig(**github_raw)
        fork_status = ForkStatusConfig(**fork_status_raw)
        logging = LoggingConfig(**_section(raw, "logging"))
        return AppConfig(github=github, fork_status=fork_status, logging=logging)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration values: {e}") from e
