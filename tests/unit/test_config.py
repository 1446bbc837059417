import pytest

from live_nft.core.config import Settings
from live_nft.core.exceptions import ConfigError


def test_require_returns_value(settings):
    assert settings.require("API_URL") == "https://data.example.com/value"
    assert settings.require("COLLECTION_ID") == 7


def test_require_missing_variable():
    settings = Settings(_env_file=None, API_KEY=None)

    with pytest.raises(ConfigError) as exc_info:
        settings.require("API_KEY")

    assert str(exc_info.value) == "env var API_KEY should be set"
    assert exc_info.value.details["variable"] == "API_KEY"


def test_require_empty_string_counts_as_missing():
    settings = Settings(_env_file=None, CRON_TIME="")

    with pytest.raises(ConfigError):
        settings.require("CRON_TIME")


def test_ipfs_url_falls_back_to_sdk_url(settings):
    assert settings.ipfs_rest_url == "https://rest.example.com/v1"

    settings.SDK_REST_URL_FOR_IPFS = "https://ipfs-rest.example.com/v1"
    assert settings.ipfs_rest_url == "https://ipfs-rest.example.com/v1"


def test_ipfs_url_without_any_sdk_url():
    settings = Settings(_env_file=None, SDK_REST_URL=None, SDK_REST_URL_FOR_IPFS=None)

    with pytest.raises(ConfigError, match="SDK_REST_URL"):
        settings.ipfs_rest_url


def test_integer_ids_are_validated():
    with pytest.raises(ValueError):
        Settings(_env_file=None, COLLECTION_ID="not-a-number")
