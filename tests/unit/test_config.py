"""Configuration tests."""

import pytest

from vml_designer.core import config
from vml_designer.core.config import Settings, resolve_db_path


@pytest.mark.unit
def test_settings_defaults(monkeypatch):
    """Defaults apply when nothing is configured."""
    monkeypatch.delenv("VML_API_KEY", raising=False)
    monkeypatch.delenv("VML_SCRIPT_WORKERS", raising=False)
    settings = Settings(db_path="/tmp/vml-test.db")

    assert settings.api_port == 8889
    assert settings.api_host == "127.0.0.1"
    assert settings.api_key == "dev-key"
    assert settings.reserved_prefix == "_"
    assert settings.designer_source == "designer.vml"
    assert settings.script_workers == 4
    assert settings.grid_size == 10


@pytest.mark.unit
def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("VML_API_PORT", "9100")
    monkeypatch.setenv("VML_GRID_SNAP", "false")
    settings = Settings(db_path="/tmp/vml-test.db")

    assert settings.api_port == 9100
    assert settings.grid_snap is False


@pytest.mark.unit
def test_settings_validation():
    """Out-of-range values are rejected."""
    with pytest.raises(Exception):
        Settings(db_path="/tmp/x.db", api_port=0)
    with pytest.raises(Exception):
        Settings(db_path="/tmp/x.db", script_workers=0)
    with pytest.raises(Exception):
        Settings(db_path="/tmp/x.db", reserved_prefix="")


@pytest.mark.unit
def test_settings_expand_home():
    settings = Settings(db_path="~/designer/vml.db", vml_dir="~/forms")
    assert not settings.db_path.startswith("~")
    assert not settings.vml_dir.startswith("~")


@pytest.mark.unit
def test_resolve_db_path_env_wins(monkeypatch, tmp_path):
    monkeypatch.setenv("VML_DB_PATH", str(tmp_path / "env.db"))
    assert resolve_db_path() == str(tmp_path / "env.db")


@pytest.mark.unit
def test_resolve_db_path_config_file(monkeypatch, tmp_path):
    """~/.vml/config holds the path when the environment does not."""
    monkeypatch.delenv("VML_DB_PATH", raising=False)
    home = tmp_path / "home"
    (home).mkdir()
    (home / "config").write_text(str(tmp_path / "configured.db") + "\n", encoding="utf-8")
    monkeypatch.setattr(config, "VML_HOME", home)

    assert resolve_db_path() == str(tmp_path / "configured.db")


@pytest.mark.unit
def test_resolve_db_path_default(monkeypatch, tmp_path):
    monkeypatch.delenv("VML_DB_PATH", raising=False)
    monkeypatch.setattr(config, "VML_HOME", tmp_path / "empty-home")

    assert resolve_db_path() == str(tmp_path / "empty-home" / "vml.db")
