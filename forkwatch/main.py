"""forkwatch entry point.

Records the repository's fork parent in a status file through a pull
request and marks every other open pull request as blocked by it.
Without --config only the environment is read.
Usage: forkwatch [--config config.yaml] [--repository owner/name]
[--excluded-repos a/b,c/d] [--check].
"""

import argparse
import logging
import sys
from pathlib import Path

from forkwatch.actions import repository_from_context, set_output
from forkwatch.adapters.github import GitHubAdapter
from forkwatch.config import ConfigError, LoggingConfig, load_config
from forkwatch.logging import setup_logging
from forkwatch.runner import run


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI options."""
    parser = argparse.ArgumentParser(
        prog="forkwatch",
        description="Track fork parent in a status file PR and block other PRs on it",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML config file (default: environment only)",
    )
    parser.add_argument(
        "--repository",
        "-r",
        default=None,
        help="Target repository owner/name (default: GITHUB_REPOSITORY)",
    )
    parser.add_argument(
        "--excluded-repos",
        default=None,
        help="Comma-separated owner/name list treated as not forked",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load and validate config, then exit",
    )
    return parser.parse_args(argv if argv is not None else sys.argv[1:])


def main(argv: list[str] | None = None) -> int:
    """Entry point: run once and map the result to an exit code."""
    args = parse_args(argv)
    logger = logging.getLogger("forkwatch")

    try:
        config = load_config(args.config)
    except ConfigError as e:
        setup_logging(LoggingConfig())
        logger.error("Invalid configuration: %s", e)
        return 1

    if args.repository:
        config.github.repository = args.repository
    if args.excluded_repos is not None:
        config.fork_status.excluded_repos = args.excluded_repos
    setup_logging(config.logging)

    try:
        token = config.require_token()
        repository = repository_from_context(config)
    except ConfigError as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    if args.check:
        print("Config OK:", repository.full_name, sorted(config.fork_status.excluded_set))
        return 0

    adapter = GitHubAdapter(token=token, api_url=config.github.api_url)
    result = run(
        adapter,
        repository,
        excluded=config.fork_status.excluded_set,
        settings=config.fork_status,
    )

    if result.pr_url:
        set_output("pr-url", result.pr_url)
    if not result.success:
        # already logged as an error where it happened
        return 1
    logger.info(result.message)
    return 0


if __name__ == "__main__":
    sys.exit(main())
