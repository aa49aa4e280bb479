"""
Tests for configuration loading
"""
import pytest

from vmix_server.config import load_config
from vmix_server.core.signature import MAX_FILE_BYTES


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("HOST", "PORT", "CLIENT_URL", "LOG_LEVEL", "FRONTEND_DIR", "VMIX_CONFIG"):
        monkeypatch.delenv(name, raising=False)


def test_defaults_when_file_missing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    settings = load_config()
    assert settings.port == 3000
    assert settings.upload_field == "excel"
    assert settings.max_file_bytes == MAX_FILE_BYTES
    assert settings.frontend_dir is None


def test_yaml_values(tmp_path):
    path = tmp_path / "server.yaml"
    path.write_text("port: 8080\nserver_name: Studio\nmax_upload_bytes: 2048\n", encoding="utf-8")
    settings = load_config(str(path))
    assert settings.port == 8080
    assert settings.server_name == "Studio"
    assert settings.max_upload_bytes == 2048


def test_env_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "server.yaml"
    path.write_text("port: 8080\n", encoding="utf-8")
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("CLIENT_URL", "http://studio.local")
    settings = load_config(str(path))
    assert settings.port == 9000
    assert settings.client_url == "http://studio.local"


def test_env_config_path(tmp_path, monkeypatch):
    path = tmp_path / "custom.yaml"
    path.write_text("log_level: DEBUG\n", encoding="utf-8")
    monkeypatch.setenv("VMIX_CONFIG", str(path))
    assert load_config().log_level == "DEBUG"


def test_explicit_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "server.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(str(path)).port == 3000
