"""Tests for configuration loading, env expansion and validation."""

from __future__ import annotations

import os
import tempfile

import pytest

from levante_catalog.config.env import expand_env_vars, is_unresolved
from levante_catalog.config.loader import (
    CONFIG_ENV_VAR,
    find_config_file,
    load_catalog_config,
    validate_config,
)
from levante_catalog.config.schema import CatalogConfig, ProviderConfig
from levante_catalog.constants import DEFAULT_DATA_DIR, DEFAULT_PORT
from levante_catalog.errors import ConfigurationError

_SAMPLE_YAML = """\
server:
  host: 0.0.0.0
  port: 9100
catalog:
  data_dir: ${CATALOG_TEST_DIR}
providers:
  - id: levante
    type: local
  - id: aitempl
    type: api
    endpoint: https://aitempl.example.com/components.json
    enabled: false
announcements:
  supabase_url: https://proj.supabase.co
  supabase_key: ${CATALOG_TEST_KEY}
"""


def _write(tmpdir: str, name: str, content: str) -> str:
    path = os.path.join(tmpdir, name)
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(content)
    return path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in (CONFIG_ENV_VAR, "SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY"):
        monkeypatch.delenv(var, raising=False)


class TestExpandEnvVars:
    def test_nested(self, monkeypatch):
        monkeypatch.setenv("CATALOG_TEST_X", "value")
        data = {"a": "${CATALOG_TEST_X}", "b": ["pre-${CATALOG_TEST_X}", 3], "c": None}
        assert expand_env_vars(data) == {"a": "value", "b": ["pre-value", 3], "c": None}

    def test_unset_left_in_place(self, monkeypatch):
        monkeypatch.delenv("CATALOG_TEST_UNSET", raising=False)
        assert expand_env_vars("${CATALOG_TEST_UNSET}") == "${CATALOG_TEST_UNSET}"
        assert is_unresolved("${CATALOG_TEST_UNSET}")
        assert not is_unresolved("plain")
        assert not is_unresolved(None)


class TestSchema:
    def test_defaults(self):
        cfg = CatalogConfig()
        assert cfg.server.port == DEFAULT_PORT
        assert cfg.catalog.data_dir == DEFAULT_DATA_DIR
        assert cfg.providers == []
        assert cfg.announcements.table == "announcements"

    def test_duplicate_provider_ids_rejected(self):
        with pytest.raises(ConfigurationError, match="Duplicate provider id"):
            validate_config(
                {"providers": [{"id": "a", "type": "local"}, {"id": "a", "type": "api"}]}
            )

    def test_provider_id_stripped(self):
        assert ProviderConfig(id="  levante ", type="local").id == "levante"

    def test_bad_port(self):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_config({"server": {"port": 70000}})
        assert "server → port" in str(exc_info.value)

    def test_bad_provider_type(self):
        with pytest.raises(ConfigurationError):
            validate_config({"providers": [{"id": "x", "type": "ftp"}]})


class TestLoadCatalogConfig:
    def test_full_file(self, monkeypatch):
        monkeypatch.setenv("CATALOG_TEST_DIR", "/srv/mcps")
        monkeypatch.setenv("CATALOG_TEST_KEY", "secret-key")
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write(tmpdir, "config.yaml", _SAMPLE_YAML)
            cfg = load_catalog_config(path)
        assert cfg.server.host == "0.0.0.0"
        assert cfg.server.port == 9100
        assert cfg.catalog.data_dir == "/srv/mcps"
        assert [p.id for p in cfg.providers] == ["levante", "aitempl"]
        assert cfg.providers[1].enabled is False
        assert cfg.announcements.supabase_key == "secret-key"

    def test_unresolved_secret_falls_back_to_env(self, monkeypatch):
        monkeypatch.delenv("CATALOG_TEST_KEY", raising=False)
        monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "from-env")
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write(tmpdir, "config.yaml", _SAMPLE_YAML)
            cfg = load_catalog_config(path)
        assert cfg.announcements.supabase_key == "from-env"

    def test_unresolved_secret_without_env_is_none(self, monkeypatch):
        monkeypatch.delenv("CATALOG_TEST_KEY", raising=False)
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write(tmpdir, "config.yaml", _SAMPLE_YAML)
            cfg = load_catalog_config(path)
        assert cfg.announcements.supabase_key is None

    def test_env_fills_unset_supabase(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://env.supabase.co")
        cfg = validate_config({})
        assert cfg.announcements.supabase_url == "https://env.supabase.co"

    def test_no_file_uses_defaults(self, monkeypatch):
        with tempfile.TemporaryDirectory() as tmpdir:
            monkeypatch.chdir(tmpdir)
            assert find_config_file() is None
            cfg = load_catalog_config()
        assert cfg.server.port == DEFAULT_PORT

    def test_cwd_discovery(self, monkeypatch):
        with tempfile.TemporaryDirectory() as tmpdir:
            _write(tmpdir, "config.yml", "server:\n  port: 9001\n")
            monkeypatch.chdir(tmpdir)
            assert find_config_file().endswith("config.yml")
            assert load_catalog_config().server.port == 9001

    def test_env_var_path(self, monkeypatch):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write(tmpdir, "custom.yaml", "server:\n  port: 9002\n")
            monkeypatch.setenv(CONFIG_ENV_VAR, path)
            assert load_catalog_config().server.port == 9002

    def test_empty_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write(tmpdir, "config.yaml", "")
            assert load_catalog_config(path).providers == []

    def test_missing_explicit_file(self):
        with pytest.raises(ConfigurationError, match="does not exist"):
            load_catalog_config("/nonexistent/config.yaml")

    def test_wrong_extension(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write(tmpdir, "config.json", "{}")
            with pytest.raises(ConfigurationError, match="Unsupported"):
                load_catalog_config(path)

    def test_non_mapping(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write(tmpdir, "config.yaml", "- a\n- b\n")
            with pytest.raises(ConfigurationError, match="mapping"):
                load_catalog_config(path)

    def test_malformed_yaml(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = _write(tmpdir, "config.yaml", "server: [unclosed\n")
            with pytest.raises(ConfigurationError, match="Error reading"):
                load_catalog_config(path)
