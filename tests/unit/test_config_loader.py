"""Unit tests for spcalendar_expander.config_loader."""

import json

import pytest

from spcalendar_expander.config_loader import DEFAULT_IMPLICIT_INSTANCE_CAP, Config, load_config

pytestmark = pytest.mark.unit


class TestConfigFromDict:
    def test_defaults(self):
        cfg = Config.from_dict({})
        assert cfg.implicit_instance_cap == DEFAULT_IMPLICIT_INSTANCE_CAP == 999
        assert cfg.log_level == "INFO"

    def test_none_mapping(self):
        assert Config.from_dict(None) == Config()

    def test_numeric_text_coerced(self):
        assert Config.from_dict({"implicit_instance_cap": "250"}).implicit_instance_cap == 250

    @pytest.mark.parametrize("raw", ["lots", 0, -5, None])
    def test_invalid_cap_falls_back_to_default(self, raw):
        assert Config.from_dict({"implicit_instance_cap": raw}).implicit_instance_cap == 999

    def test_log_level_upper_cased(self):
        assert Config.from_dict({"log_level": "debug"}).log_level == "DEBUG"


class TestLoadConfig:
    def test_missing_file_uses_defaults(self, tmp_path):
        assert load_config(str(tmp_path / "absent.yaml")) == Config()

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("implicit_instance_cap: 100\nlog_level: warning\n")
        assert load_config(str(path)) == Config(implicit_instance_cap=100, log_level="WARNING")

    def test_empty_yaml_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(str(path)) == Config()

    def test_json_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"implicit_instance_cap": 50}))
        assert load_config(str(path)).implicit_instance_cap == 50

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError):
            load_config(str(path))
