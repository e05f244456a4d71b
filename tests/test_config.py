"""Tests for forkwatch.config (YAML + env loading, exclusion list)."""

from pathlib import Path

import pytest

from forkwatch.config import (
    AppConfig,
    ConfigError,
    ForkStatusConfig,
    load_config,
    parse_excluded_repos,
)

_ENV_KEYS = (
    "GITHUB_TOKEN",
    "GITHUB_TOKEN_FILE",
    "GITHUB_REPOSITORY",
    "GITHUB_API_URL",
    "FORKWATCH_EXCLUDED_REPOS",
    "FORKWATCH_BRANCH_NAME",
    "LOGGING_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestParseExcludedRepos:
    """parse_excluded_repos splits and trims comma-separated names."""

    def test_trims_entries(self) -> None:
        """Whitespace around entries is removed."""
        assert parse_excluded_repos(" org/a ,org/b,  org/c") == frozenset({"org/a", "org/b", "org/c"})

    def test_drops_empty_entries(self) -> None:
        """Empty entries (trailing commas, blanks) are dropped."""
        assert parse_excluded_repos("org/a,, ,") == frozenset({"org/a"})

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty(self, value: str | None) -> None:
        """No value means no exclusions."""
        assert parse_excluded_repos(value) == frozenset()


class TestDefaults:
    """Defaults match the status branch conventions."""

    def test_fork_status_defaults(self) -> None:
        """Branch, file and pull request texts have fixed defaults."""
        cfg = ForkStatusConfig()
        assert cfg.branch_name == "update-fork-status-2"
        assert cfg.status_file == ".upstream"
        assert cfg.target_branch == "main"
        assert cfg.commit_message == "Update fork status"
        assert cfg.pr_title == "Update fork status"
        assert cfg.pr_body == "Automatically updating fork status"
        assert cfg.excluded_set == frozenset()

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """FORKWATCH_* and GITHUB_* env vars are read."""
        monkeypatch.setenv("FORKWATCH_EXCLUDED_REPOS", "org/a, org/b")
        monkeypatch.setenv("FORKWATCH_BRANCH_NAME", "fork-status")
        monkeypatch.setenv("GITHUB_REPOSITORY", "octo/widgets")
        monkeypatch.setenv("GITHUB_API_URL", "https://ghe.example.com/api/v3")
        cfg = AppConfig()
        assert cfg.fork_status.excluded_set == frozenset({"org/a", "org/b"})
        assert cfg.fork_status.branch_name == "fork-status"
        assert cfg.github.repository == "octo/widgets"
        assert cfg.github.api_url == "https://ghe.example.com/api/v3"


class TestLoadConfig:
    """load_config reads YAML and applies env."""

    def test_missing_file_returns_defaults(self, tmp_path: Path) -> None:
        """No file yields default config."""
        cfg = load_config(tmp_path / "absent.yaml")
        assert cfg.fork_status.branch_name == "update-fork-status-2"
        assert cfg.logging.level == "INFO"

    def test_yaml_values(self, tmp_path: Path) -> None:
        """YAML sections populate the models; list exclusions are joined."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "github:\n"
            "  repository: octo/widgets\n"
            "fork_status:\n"
            "  excluded_repos: [org/a, ' org/b ']\n"
            "  target_branch: develop\n"
            "logging:\n"
            "  level: DEBUG\n"
        )
        cfg = load_config(path)
        assert cfg.github.repository == "octo/widgets"
        assert cfg.fork_status.excluded_set == frozenset({"org/a", "org/b"})
        assert cfg.fork_status.target_branch == "develop"
        assert cfg.logging.level == "DEBUG"

    def test_env_beats_yaml_for_run_inputs(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """GITHUB_REPOSITORY and FORKWATCH_EXCLUDED_REPOS override YAML."""
        path = tmp_path / "config.yaml"
        path.write_text("github:\n  repository: a/b\nfork_status:\n  excluded_repos: org/a\n")
        monkeypatch.setenv("GITHUB_REPOSITORY", "octo/widgets")
        monkeypatch.setenv("FORKWATCH_EXCLUDED_REPOS", "org/z")
        cfg = load_config(path)
        assert cfg.github.repository == "octo/widgets"
        assert cfg.fork_status.excluded_set == frozenset({"org/z"})

    def test_token_substitution(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """${VAR} in YAML is replaced from the environment."""
        path = tmp_path / "config.yaml"
        path.write_text("github:\n  token: ${MY_TOKEN}\n")
        monkeypatch.setenv("MY_TOKEN", "secret-1")
        cfg = load_config(path)
        assert cfg.require_token() == "secret-1"

    def test_no_path_ignores_cwd_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without a path a config.yaml in the working directory is not read."""
        (tmp_path / "config.yaml").write_text("- not\n- a mapping\n")
        monkeypatch.chdir(tmp_path)
        cfg = load_config()
        assert cfg.fork_status.branch_name == "update-fork-status-2"

    @pytest.mark.parametrize("content", ["- org/a\n- org/b\n", "just a string\n", "42\n"])
    def test_non_mapping_top_level_raises(self, tmp_path: Path, content: str) -> None:
        """A file that is not a mapping raises ConfigError."""
        path = tmp_path / "config.yaml"
        path.write_text(content)
        with pytest.raises(ConfigError, match="must contain a mapping"):
            load_config(path)

    def test_non_mapping_section_raises(self, tmp_path: Path) -> None:
        """A section that is not a mapping raises ConfigError."""
        path = tmp_path / "config.yaml"
        path.write_text("fork_status: [org/a]\n")
        with pytest.raises(ConfigError, match="fork_status"):
            load_config(path)

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        """YAML syntax errors raise ConfigError."""
        path = tmp_path / "config.yaml"
        path.write_text("github: {repository: [unclosed\n")
        with pytest.raises(ConfigError, match="Cannot load"):
            load_config(path)

    def test_invalid_value_raises(self, tmp_path: Path) -> None:
        """Values rejected by the settings models raise ConfigError."""
        path = tmp_path / "config.yaml"
        path.write_text("fork_status:\n  branch_name: {nested: true}\n")
        with pytest.raises(ConfigError, match="Invalid configuration values"):
            load_config(path)


class TestToken:
    """Token resolution from config, env and secret file."""

    def test_token_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """GITHUB_TOKEN is used when config has none."""
        monkeypatch.setenv("GITHUB_TOKEN", "env-token")
        cfg = load_config(tmp_path / "absent.yaml")
        assert cfg.require_token() == "env-token"

    def test_token_from_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """GITHUB_TOKEN_FILE is read when no token is set."""
        secret = tmp_path / "token"
        secret.write_text("file-token\n")
        path = tmp_path / "config.yaml"
        path.write_text("github:\n  token: ${UNSET_TOKEN}\n")
        monkeypatch.setenv("GITHUB_TOKEN_FILE", str(secret))
        cfg = load_config(path)
        assert cfg.require_token() == "file-token"

    def test_unreadable_token_file_raises(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """A token file that cannot be read raises ConfigError."""
        monkeypatch.setenv("GITHUB_TOKEN_FILE", str(tmp_path / "missing-token"))
        cfg = load_config()
        with pytest.raises(ConfigError, match="GITHUB_TOKEN_FILE"):
            cfg.require_token()

    def test_missing_token_raises(self, tmp_path: Path) -> None:
        """require_token raises ConfigError without any token."""
        cfg = load_config(tmp_path / "absent.yaml")
        with pytest.raises(ConfigError):
            cfg.require_token()
