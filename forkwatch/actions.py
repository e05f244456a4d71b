"""GitHub Actions integration: run context and step outputs.

Failure annotations are emitted by the logging setup (see
forkwatch.logging.ActionsAnnotationHandler)."""

import os
import uuid
from typing import Mapping

from forkwatch.config import AppConfig, ConfigError
from forkwatch.models import RepositoryIdentity


def repository_from_context(config: AppConfig, env: Mapping[str, str] | None = None) -> RepositoryIdentity:
    """Resolve the target repository from config or GITHUB_REPOSITORY.

    Raises:
        ConfigError: If no repository is configured or the name is invalid.
    """
    env = os.environ if env is None else env
    full_name = config.github.repository or env.get("GITHUB_REPOSITORY") or ""
    if not full_name:
        raise ConfigError("Missing repository (github.repository or GITHUB_REPOSITORY)")
    try:
        return RepositoryIdentity.parse(full_name)
    except ValueError as e:
        raise ConfigError(str(e)) from e


def set_output(name: str, value: str, env: Mapping[str, str] | None = None) -> bool:
    """Append a step output to $GITHUB_OUTPUT.

    Multi-line values use the heredoc delimiter form. Returns False when
    not running under Actions (no GITHUB_OUTPUT).
    """
    env = os.environ if env is None else env
    output_path = env.get("GITHUB_OUTPUT")
    if not output_path:
        return False
    with open(output_path, "a", encoding="utf-8") as f:
        if "\n" in value:
            delimiter = f"ghadelimiter_{uuid.uuid4().hex}"
            f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
        else:
            f.write(f"{name}={value}\n")
    return True

