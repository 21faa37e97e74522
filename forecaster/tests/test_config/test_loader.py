"""Tests for config loading, env overrides and dotted-key lookup."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from forecaster.config.loader import config_hash, get_config_value, load_config
from forecaster.config.schema import ServiceConfig


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path: Path):
        config = load_config(tmp_path / "nope.yaml", env={})
        assert config == ServiceConfig()

    def test_no_path_gives_defaults(self):
        config = load_config(env={})
        assert config.rate_limit.min_interval_ms == 66
        assert config.rate_limit.max_concurrent == 5
        assert config.forecast.target_hour == 14
        assert config.forecast.max_hour_distance == 3
        assert config.cache.coordinate_precision == 4
        assert config.cache.outer_ttl_hours == 48

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path, env={}) == ServiceConfig()

    def test_yaml_values(self, tmp_path: Path):
        path = tmp_path / "c.yaml"
        with open(path, "w") as f:
            yaml.dump({"rate_limit": {"min_interval_ms": 100}, "server": {"port": 8080}}, f)
        config = load_config(path, env={})
        assert config.rate_limit.min_interval_ms == 100
        assert config.server.port == 8080

    def test_env_overrides_file(self, tmp_path: Path):
        path = tmp_path / "c.yaml"
        with open(path, "w") as f:
            yaml.dump({"upstream": {"base_url": "https://from-file"}}, f)
        env = {
            "YR_API_URL": "https://from-env",
            "USER_AGENT": "tests/1.0",
            "REDIS_URL": "redis://cache:6379/0",
            "PORT": "9000",
        }
        config = load_config(path, env=env)
        assert config.upstream.base_url == "https://from-env"
        assert config.upstream.user_agent == "tests/1.0"
        assert config.geocoding.user_agent == "tests/1.0"
        assert config.cache.redis_url == "redis://cache:6379/0"
        assert config.server.port == 9000

    def test_env_override_into_empty_section(self, tmp_path: Path):
        path = tmp_path / "c.yaml"
        path.write_text("upstream:\ngeocoding:\n")
        config = load_config(path, env={"YR_API_URL": "http://x", "USER_AGENT": "tests/1.0"})
        assert config.upstream.base_url == "http://x"
        assert config.geocoding.user_agent == "tests/1.0"

    def test_unknown_key_rejected(self, tmp_path: Path):
        path = tmp_path / "c.yaml"
        with open(path, "w") as f:
            yaml.dump({"cache": {"ttl": 5}}, f)
        with pytest.raises(ValidationError):
            load_config(path, env={})

    def test_out_of_range_rejected(self, tmp_path: Path):
        path = tmp_path / "c.yaml"
        with open(path, "w") as f:
            yaml.dump({"forecast": {"target_hour": 24}}, f)
        with pytest.raises(ValidationError):
            load_config(path, env={})

    def test_shipped_config_matches_defaults(self):
        path = Path(__file__).parents[3] / "config" / "forecaster.yaml"
        assert load_config(path, env={}) == ServiceConfig()


class TestConfigValues:
    def test_get_nested(self):
        assert get_config_value(ServiceConfig(), "rate_limit.max_concurrent") == 5

    def test_get_missing(self):
        with pytest.raises(KeyError):
            get_config_value(ServiceConfig(), "rate_limit.nope")

    def test_hash_is_stable(self):
        assert config_hash(ServiceConfig()) == config_hash(ServiceConfig())
        changed = ServiceConfig(server={"port": 1})
        assert config_hash(changed) != config_hash(ServiceConfig())
