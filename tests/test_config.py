"""Tests for configuration loading."""

from pathlib import Path

import pytest

from s3syncd.config import config_from_dict, load_config, parse_config_lines
from s3syncd.exceptions import ConfigError
from s3syncd.sync.modes import MarkerPolicy


def write_config(path: Path, text: str) -> Path:
    config_file = path / "sync.conf"
    config_file.write_text(text)
    return config_file


class TestParseConfigLines:
    """Tests for the key=value parser."""

    def test_skips_comments_and_blank_lines(self):
        values = parse_config_lines(
            ["# comment", "", "   ", "local_dir = /data", "bucket_name=b"]
        )
        assert values == {"local_dir": "/data", "bucket_name": "b"}

    def test_value_may_contain_equals(self):
        values = parse_config_lines(["aws_secret_key = abc=def=="])
        assert values["aws_secret_key"] == "abc=def=="

    def test_invalid_line(self):
        with pytest.raises(ConfigError, match="Invalid config line 2"):
            parse_config_lines(["local_dir = /data", "no separator here"])

    def test_empty_key(self):
        with pytest.raises(ConfigError, match="Invalid config line"):
            parse_config_lines(["= value"])


class TestConfigFromDict:
    """Tests for building SyncConfig from parsed values."""

    def test_minimal(self):
        config = config_from_dict({"local_dir": "/data", "bucket_name": "b"})

        assert config.target.local == Path("/data")
        assert config.target.bucket == "b"
        assert config.target.prefix == ""
        assert config.target.marker_file == "syncd.txt"
        assert config.target.marker_policy == MarkerPolicy.STRICT
        assert config.target.reconcile is False
        assert config.interval == 0.0
        assert config.periodic is False
        assert config.access_key is None

    def test_all_fields(self):
        config = config_from_dict(
            {
                "aws_access_key": "AKIA",
                "aws_secret_key": "secret",
                "aws_region": "eu-central-1",
                "endpoint_url": "https://s3.example.com",
                "local_dir": "/data",
                "bucket_name": "b",
                "prefix": "/nightly/",
                "sync_marker_file": "done.txt",
                "sync_interval": "1h30m",
                "marker_policy": "per_subdirectory",
                "reconcile": "true",
                "operation_timeout": "15",
                "max_retries": "5",
            }
        )

        assert config.access_key == "AKIA"
        assert config.secret_key == "secret"
        assert config.region == "eu-central-1"
        assert config.endpoint_url == "https://s3.example.com"
        assert config.target.prefix == "nightly"
        assert config.target.marker_file == "done.txt"
        assert config.target.marker_policy == MarkerPolicy.PER_SUBDIRECTORY
        assert config.target.reconcile is True
        assert config.interval == 5400.0
        assert config.periodic is True
        assert config.operation_timeout == 15.0
        assert config.max_retries == 5

    @pytest.mark.parametrize("missing", ["local_dir", "bucket_name"])
    def test_missing_required_field(self, missing):
        values = {"local_dir": "/data", "bucket_name": "b"}
        del values[missing]
        with pytest.raises(ConfigError, match=f"Missing required config.*{missing}"):
            config_from_dict(values)

    def test_empty_required_field(self):
        with pytest.raises(ConfigError, match="bucket_name"):
            config_from_dict({"local_dir": "/data", "bucket_name": ""})

    def test_partial_credentials(self):
        with pytest.raises(ConfigError, match="must be given together"):
            config_from_dict(
                {"local_dir": "/d", "bucket_name": "b", "aws_access_key": "AKIA"}
            )

    @pytest.mark.parametrize(
        "key,value,match",
        [
            ("sync_interval", "10", "Invalid sync interval"),
            ("sync_interval", "-5m", "must not be negative"),
            ("marker_policy", "sometimes", "Invalid marker policy"),
            ("reconcile", "maybe", "Invalid reconcile flag"),
            ("operation_timeout", "soon", "Invalid numeric setting"),
            ("operation_timeout", "0", "must be positive"),
            ("max_retries", "-1", "must not be negative"),
            ("sync_marker_file", "a/b.txt", "Invalid marker file name"),
        ],
    )
    def test_invalid_values(self, key, value, match):
        values = {"local_dir": "/data", "bucket_name": "b", key: value}
        with pytest.raises(ConfigError, match=match):
            config_from_dict(values)

    def test_unknown_field_is_ignored(self, caplog):
        config = config_from_dict(
            {"local_dir": "/data", "bucket_name": "b", "colour": "blue"}
        )
        assert config.target.bucket == "b"
        assert "Ignoring unknown config field: colour" in caplog.text


class TestLoadConfig:
    """Tests for load_config."""

    def test_load_from_file(self, temp_dir):
        config_file = write_config(
            temp_dir,
            "# s3syncd\n"
            "aws_access_key = AKIA\n"
            "aws_secret_key = secret\n"
            f"local_dir = {temp_dir}\n"
            "bucket_name = my-bucket\n"
            "prefix = exports\n"
            "sync_interval = 5m\n",
        )

        config = load_config(config_file)

        assert config.target.local == temp_dir
        assert config.target.bucket == "my-bucket"
        assert config.target.prefix == "exports"
        assert config.interval == 300.0

    def test_missing_file(self, temp_dir):
        with pytest.raises(ConfigError, match="Error opening config file"):
            load_config(temp_dir / "missing.conf")

    def test_invalid_line_in_file(self, temp_dir):
        config_file = write_config(temp_dir, "local_dir /data\n")
        with pytest.raises(ConfigError, match="Invalid config line 1"):
            load_config(config_file)

    def test_undecodable_file(self, temp_dir):
        """A config file that is not UTF-8 is a config error."""
        config_file = temp_dir / "latin1.conf"
        config_file.write_bytes(b"local_dir = /data/caf\xe9\nbucket_name = b\n")

        with pytest.raises(ConfigError, match="Error opening config file"):
            load_config(config_file)
