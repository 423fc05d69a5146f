"""Tests for configuration loading."""

import pytest
import yaml
from pydantic import ValidationError

from keylight_exporter.config import ExporterConfig, MetricsConfig, load_config


def test_load_config_from_yaml(tmp_path):
    config_data = {
        "metrics": {"addr": "127.0.0.1:9300", "path": "/probe"},
        "fetch": {"timeout_seconds": 2.5},
        "logging": {"level": "DEBUG", "format": "text"},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(config_data))

    cfg = load_config(path)
    assert cfg.metrics.host == "127.0.0.1"
    assert cfg.metrics.port == 9300
    assert cfg.metrics.path == "/probe"
    assert cfg.fetch.timeout_seconds == 2.5
    assert cfg.logging.level == "debug"
    assert cfg.logging.format == "text"


def test_load_config_defaults():
    cfg = ExporterConfig()
    assert cfg.metrics.addr == ":9288"
    assert cfg.metrics.host is None
    assert cfg.metrics.port == 9288
    assert cfg.metrics.path == "/metrics"
    assert cfg.fetch.timeout_seconds == 5.0


def test_load_config_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(path) == ExporterConfig()


def test_load_config_file_not_found():
    with pytest.raises(FileNotFoundError):
        load_config("/nonexistent/path.yaml")


@pytest.mark.parametrize(
    "metrics",
    [{"path": "metrics"}, {"addr": "localhost"}, {"addr": "localhost:http"}],
)
def test_metrics_config_invalid(metrics):
    with pytest.raises(ValidationError):
        MetricsConfig.model_validate(metrics)


def test_ipv6_listen_addr():
    cfg = MetricsConfig(addr="[::1]:9288")
    assert cfg.host == "::1"
    assert cfg.port == 9288


def test_invalid_timeout():
    with pytest.raises(ValidationError):
        ExporterConfig.model_validate({"fetch": {"timeout_seconds": 0}})
