"""Integration tests for configuration loading with layered precedence.

Tests the real load_config() function with actual YAML files, environment
variables, and CLI overrides to verify precedence: defaults < YAML < ENV < CLI.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from animedekho.infrastructure.config.load import load_config

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """No ANIMEDEKHO_* variables leak in or out (load_dotenv writes os.environ)."""
    for key in list(os.environ):
        if key.startswith("ANIMEDEKHO_"):
            monkeypatch.delenv(key)
    yield
    for key in list(os.environ):
        if key.startswith("ANIMEDEKHO_"):
            del os.environ[key]


@pytest.fixture()
def yaml_config(tmp_path: Path) -> Path:
    """Write a minimal YAML config and return its path."""
    config = {
        "app_name": "animedekho-test",
        "environment": "test",
        "site": {"base_url": "https://mirror.example/"},
        "http": {
            "timeout_seconds": 15.0,
            "user_agent": "TestAgent/1.0",
            "rate_limit_rps": 0,
        },
        "logging": {"level": "DEBUG", "format": "console"},
        "links": {"video_hosts": ["myhost.example", "  "]},
        "export": {"output_dir": str(tmp_path / "out"), "episode_delay_seconds": 0},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(config), encoding="utf-8")
    return path


class TestDefaultsOnly:
    def test_defaults(self) -> None:
        cfg = load_config()
        assert cfg.site_base_url == "https://animedekho.app"
        assert cfg.fetcher_backend == "httpx"
        assert cfg.http_server_cookie == "toronites_server=vidstream"
        assert cfg.log_level == "INFO"
        assert cfg.log_format == "console"
        assert "as-cdn21.top" in cfg.links.video_hosts
        assert cfg.links.treat_generic_embeds_as_placeholders is True
        assert cfg.export.episode_delay_seconds == 0.5
        assert cfg.database.host == "localhost"
        assert cfg.database.port == 3306


class TestYamlLayer:
    def test_yaml_overrides_defaults(self, yaml_config: Path, tmp_path: Path) -> None:
        cfg = load_config(config_path=yaml_config)
        assert cfg.app_name == "animedekho-test"
        assert cfg.site_base_url == "https://mirror.example"
        assert cfg.http_timeout_seconds == 15.0
        assert cfg.http_rate_limit_rps == 0
        # Untouched keys in a section keep their defaults.
        assert cfg.http_max_retries == 3
        assert cfg.log_level == "DEBUG"
        assert cfg.links.video_hosts == ["myhost.example"]
        assert cfg.export.output_dir == tmp_path / "out"
        assert cfg.export.episode_delay_seconds == 0

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(config_path=tmp_path / "nope.yaml")

    def test_non_mapping_yaml_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_config(config_path=path)

    def test_empty_yaml_is_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(config_path=path).site_base_url == "https://animedekho.app"


class TestEnvLayer:
    def test_env_overrides_yaml(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ANIMEDEKHO_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("ANIMEDEKHO_FETCHER_BACKEND", "playwright")
        cfg = load_config(config_path=yaml_config)
        assert cfg.log_level == "WARNING"
        assert cfg.fetcher_backend == "playwright"
        assert cfg.http_timeout_seconds == 15.0

    def test_dotenv_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("ANIMEDEKHO_HTTP_MAX_RETRIES=7\n", encoding="utf-8")
        cfg = load_config(dotenv_path=env_file)
        assert cfg.http_max_retries == 7

    def test_missing_dotenv_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(dotenv_path=tmp_path / ".env")

    def test_database_env_overrides_yaml(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = tmp_path / "c.yaml"
        path.write_text(
            "database:\n  host: yaml-db\n  user: importer\n  name: anime\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("ANIMEDEKHO_DB_HOST", "env-db")
        monkeypatch.setenv("ANIMEDEKHO_DB_PASSWORD", "s3cret")
        cfg = load_config(config_path=path)
        assert cfg.database.host == "env-db"
        assert cfg.database.password == "s3cret"
        assert cfg.database.user == "importer"
        assert cfg.database.name == "anime"

    def test_prod_environment_defaults_to_json_logs(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ANIMEDEKHO_ENVIRONMENT", "prod")
        assert load_config().log_format == "json"


class TestCliLayer:
    def test_cli_beats_env(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ANIMEDEKHO_LOG_LEVEL", "WARNING")
        cfg = load_config(
            config_path=yaml_config,
            cli_overrides={"log_level": "ERROR", "log_format": "json"},
        )
        assert cfg.log_level == "ERROR"
        assert cfg.log_format == "json"


class TestValidation:
    def test_bad_base_url(self) -> None:
        with pytest.raises(ValidationError):
            load_config(cli_overrides={"site_base_url": "ftp://animedekho.app"})

    def test_bad_database_port(self, tmp_path: Path) -> None:
        path = tmp_path / "c.yaml"
        path.write_text("database:\n  port: 0\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_config(config_path=path)

    def test_negative_delay(self, tmp_path: Path) -> None:
        path = tmp_path / "c.yaml"
        path.write_text("export:\n  anime_delay_seconds: -1\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_config(config_path=path)
