from pathlib import Path

import pytest

from settings import (DEFAULT_API_URL, DEFAULT_COUNT, DEFAULT_GATEWAY, ConfigError,
                      PipelineConfig, load_config)


def test_defaults_from_empty_env():
    config = load_config({})
    assert config.image_count == DEFAULT_COUNT
    assert config.gateway_host == DEFAULT_GATEWAY
    assert config.api_url == DEFAULT_API_URL
    assert config.pinata_jwt is None
    assert config.seed is None
    assert config.images_dir == Path("output") / "images"
    assert config.metadata_dir == Path("output") / "metadata"


def test_values_from_env():
    config = load_config({
        "IMAGE_COUNT": "12",
        "PINATA_JWT": "secret",
        "PINATA_GATEWAY": "example.mypinata.cloud",
        "PINATA_API_URL": "http://localhost:9999/",
        "OUTPUT_DIR": "/tmp/run",
        "IMAGE_SEED": "7",
    })
    assert config.image_count == 12
    assert config.require_jwt() == "secret"
    assert config.gateway_host == "example.mypinata.cloud"
    assert config.api_url == "http://localhost:9999"
    assert config.output_dir == Path("/tmp/run")
    assert config.seed == 7


@pytest.mark.parametrize("env", [{"IMAGE_COUNT": "five"}, {"IMAGE_COUNT": "-1"}, {"IMAGE_SEED": "x"}])
def test_bad_values_raise(env):
    with pytest.raises(ConfigError):
        load_config(env)


def test_missing_jwt_only_fails_when_needed():
    config = PipelineConfig()
    with pytest.raises(ConfigError, match="PINATA_JWT"):
        config.require_jwt()


def test_zero_count_is_allowed():
    assert load_config({"IMAGE_COUNT": "0"}).image_count == 0
