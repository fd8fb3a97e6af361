"""
Tests for marketplace_config: YAML loading, environment overrides and the
bridge that boots a Marketplace.
"""

from pathlib import Path

import pytest
import yaml

from marketplace_config import DEFAULT_SETTINGS_PATH, get_active_settings
from marketplace_config.bridges import open_marketplace
from marketplace_config.loader import (
    ENV_DATABASE_URL,
    ENV_LOG_LEVEL,
    ENV_SYSTEM_OWNER,
    apply_env_overrides,
    compute_checksum,
    load_yaml_file,
    parse_settings,
)
from marketplace_config.schema import MarketplaceSettings
from marketplace_kernel.db.engine import reset_engine
from marketplace_kernel.domain.clock import DeterministicClock
from marketplace_kernel.domain.payout import InMemoryWallet


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (ENV_DATABASE_URL, ENV_LOG_LEVEL, ENV_SYSTEM_OWNER):
        monkeypatch.delenv(name, raising=False)


def _write(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


class TestParseSettings:

    def test_defaults(self):
        settings = parse_settings({"system_owner": "0xowner"})
        assert settings == MarketplaceSettings(system_owner="0xowner")
        assert settings.database_url == "sqlite://"
        assert settings.sql_echo is False
        assert settings.log_level == "INFO"

    def test_missing_owner(self):
        with pytest.raises(KeyError):
            parse_settings({"database_url": "sqlite://"})

    def test_invalid_log_level(self):
        with pytest.raises(ValueError):
            parse_settings({"system_owner": "0xowner", "log_level": "chatty"})

    def test_log_level_case_insensitive(self):
        assert parse_settings({"system_owner": "0xo", "log_level": "debug"}).log_level == "DEBUG"

    def test_checksum_deterministic(self):
        a = parse_settings({"system_owner": "0xo"})
        b = parse_settings({"system_owner": "0xo"})
        c = parse_settings({"system_owner": "0xp"})
        assert compute_checksum(a) == compute_checksum(b)
        assert compute_checksum(a) != compute_checksum(c)


class TestLoadYaml:

    def test_bundled_default(self):
        data = load_yaml_file(DEFAULT_SETTINGS_PATH)
        assert data["database_url"] == "sqlite://"
        assert data["system_owner"]

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_yaml_file(path) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_yaml_file(tmp_path / "absent.yaml")


class TestEnvOverrides:

    def test_environment_wins(self):
        merged = apply_env_overrides(
            {"system_owner": "0xfile", "log_level": "INFO"},
            environ={ENV_SYSTEM_OWNER: "0xenv", ENV_LOG_LEVEL: "ERROR"},
        )
        assert merged["system_owner"] == "0xenv"
        assert merged["log_level"] == "ERROR"

    def test_empty_variable_ignored(self):
        merged = apply_env_overrides({"system_owner": "0xfile"}, environ={ENV_SYSTEM_OWNER: ""})
        assert merged["system_owner"] == "0xfile"

    def test_get_active_settings_reads_env(self, tmp_path, monkeypatch):
        path = _write(tmp_path, {"system_owner": "0xfile"})
        monkeypatch.setenv(ENV_DATABASE_URL, "sqlite:///:memory:")
        settings = get_active_settings(path)
        assert settings.system_owner == "0xfile"
        assert settings.database_url == "sqlite:///:memory:"

    def test_owner_supplied_only_by_env(self, tmp_path, monkeypatch):
        path = _write(tmp_path, {"log_level": "WARNING"})
        monkeypatch.setenv(ENV_SYSTEM_OWNER, "0xenv")
        assert get_active_settings(path).system_owner == "0xenv"


class TestOpenMarketplace:

    def test_boots_working_marketplace(self):
        settings = MarketplaceSettings(system_owner="0xowner")
        wallet = InMemoryWallet()
        try:
            market = open_marketplace(settings, clock=DeterministicClock(), payout=wallet)
            project_id = market.create_project("Bridge", "Span", 10, caller="0xa")
            market.place_bid(project_id, 10, 10, caller="0xb")
            assert market.withdraw("0xowner") == 10
            assert wallet.holdings_of("0xowner") == 10
            assert market.status().owner == "0xowner"
        finally:
            reset_engine()
