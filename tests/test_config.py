"""
Tests for configuration loading and precedence.
"""

from pathlib import Path

import pytest

from appctx.config import AppConfig, ConfigError, load_config
from appctx.reporter import DEFAULT_HEADER

pytestmark = pytest.mark.unit


def test_defaults_without_file_or_environment():
    config = load_config()

    assert config == AppConfig()
    assert config.name == "application"
    assert config.report_header == DEFAULT_HEADER
    assert config.server.enabled is True
    assert config.server.port == 8080
    assert config.logging.format == "console"
    assert config.logging.file is None


def test_reads_default_toml_file(tmp_path):
    (tmp_path / "appctx.toml").write_text(
        'name = "demo"\n'
        "[server]\n"
        "port = 9090\n"
        "enabled = false\n"
        "[logging]\n"
        'level = "debug"\n'
        'format = "json"\n'
        'file = "logs/app.log"\n'
    )

    config = load_config()

    assert config.name == "demo"
    assert config.server.port == 9090
    assert config.server.enabled is False
    assert config.logging.level == "DEBUG"
    assert config.logging.format == "json"
    assert config.logging.file == Path("logs/app.log")


def test_environment_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "custom.toml"
    path.write_text('name = "from-file"\n[server]\nport = 9090\n')
    monkeypatch.setenv("APPCTX_NAME", "from-env")
    monkeypatch.setenv("APPCTX_SERVER_ENABLED", "off")
    monkeypatch.setenv("APPCTX_REPORT_HEADER", "Listing {count} registered components:")

    config = load_config(path)

    assert config.name == "from-env"
    assert config.server.port == 9090
    assert config.server.enabled is False
    assert config.report_header == "Listing {count} registered components:"


def test_config_file_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "elsewhere.toml"
    path.write_text('name = "elsewhere"\n')
    monkeypatch.setenv("APPCTX_CONFIG_FILE", str(path))

    assert load_config().name == "elsewhere"


def test_missing_explicit_file():
    with pytest.raises(ConfigError, match="not found"):
        load_config("does-not-exist.toml")


def test_unparseable_file(tmp_path):
    path = tmp_path / "broken.toml"
    path.write_text("name = \n")

    with pytest.raises(ConfigError, match="Cannot parse"):
        load_config(path)


@pytest.mark.parametrize(
    "env_var, value",
    [
        ("APPCTX_SERVER_ENABLED", "maybe"),
        ("APPCTX_SERVER_PORT", "eighty"),
        ("APPCTX_SERVER_PORT", "70000"),
        ("APPCTX_LOG_LEVEL", "chatty"),
        ("APPCTX_LOG_FORMAT", "xml"),
    ],
)
def test_invalid_values(monkeypatch, env_var, value):
    monkeypatch.setenv(env_var, value)

    with pytest.raises(ConfigError):
        load_config()


def test_boolean_strings_in_file_are_parsed(tmp_path):
    path = tmp_path / "custom.toml"
    path.write_text('[server]\nenabled = "false"\n', encoding="utf-8")

    assert load_config(path).server.enabled is False


def test_invalid_boolean_in_file(tmp_path):
    path = tmp_path / "custom.toml"
    path.write_text('[server]\nenabled = "maybe"\n', encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(path)
