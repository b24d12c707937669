"""Tests for .tfsentinel.yml loading"""

import pytest
from tfsentinel.config import ScanConfig, find_config, load_config, parse_config
from tfsentinel.errors import ConfigError
from tfsentinel.models import Severity


class TestLoadConfig:
    def test_full_config(self, tmp_path):
        path = tmp_path / ".tfsentinel.yml"
        path.write_text("exclude:\n  - aws002\n  - GEN003\nminimum_severity: Warning\n")
        config = load_config(path)
        assert config.exclude == ["AWS002", "GEN003"]
        assert config.minimum_severity is Severity.WARNING

    def test_empty_file(self, tmp_path):
        path = tmp_path / ".tfsentinel.yml"
        path.write_text("")
        config = load_config(path)
        assert config == ScanConfig()

    def test_comma_separated_exclude(self):
        assert parse_config({"exclude": "AWS001, AWS002"}).exclude == ["AWS001", "AWS002"]

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / ".tfsentinel.yml"
        path.write_text("exclude: [AWS001\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "missing.yml")

    def test_top_level_must_be_mapping(self):
        with pytest.raises(ConfigError):
            parse_config(["AWS001"])

    def test_bad_exclude_type(self):
        with pytest.raises(ConfigError, match="exclude"):
            parse_config({"exclude": {"AWS001": True}})

    def test_bad_severity(self):
        with pytest.raises(ConfigError, match="Unknown severity"):
            parse_config({"minimum_severity": "critical"})

    def test_unknown_key_logged(self, caplog):
        config = parse_config({"exlude": ["AWS001"]})
        assert config.exclude == []
        assert "exlude" in caplog.text


class TestFindConfig:
    def test_finds_yml(self, tmp_path):
        (tmp_path / ".tfsentinel.yml").write_text("exclude: []\n")
        assert find_config(tmp_path) == tmp_path / ".tfsentinel.yml"

    def test_finds_yaml(self, tmp_path):
        (tmp_path / ".tfsentinel.yaml").write_text("exclude: []\n")
        assert find_config(tmp_path) == tmp_path / ".tfsentinel.yaml"

    def test_none_when_absent(self, tmp_path):
        assert find_config(tmp_path) is None


class TestScanConfig:
    def test_merge_exclude_deduplicates(self):
        config = ScanConfig(exclude=["AWS001"])
        config.merge_exclude(["aws001", " AWS002 ", ""])
        assert config.exclude == ["AWS001", "AWS002"]
