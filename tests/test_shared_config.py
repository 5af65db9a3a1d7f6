"""
Unit tests for shared configuration and error handling.
"""

import pytest

from shared.config import BaseConfig, get_config
from shared.errors import AuthenticationError, PurgeConfigError, PurgeError, UnsupportedCDNError


class TestConfig:
    """Test cases for environment-driven configuration."""

    def test_defaults(self, monkeypatch):
        for name in ("CACHE_API_KEY", "CACHE_CLOUDFLARE_CONCURRENCY", "HLX_CONFIG_SERVICE_URL"):
            monkeypatch.delenv(name, raising=False)

        config = BaseConfig()

        assert config.cache_api_key is None
        assert config.config_service_url == "https://config.aem.page"
        assert config.cloudflare_concurrency == 8
        assert config.cloudflare_stop_on_error is False
        assert config.akamai_timeout_seconds == 10.0

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("CACHE_API_KEY", "from-env")
        monkeypatch.setenv("HLX_ADMIN_MANAGED_PURGEPROXY_TOKEN", "proxy-token")
        monkeypatch.setenv("CACHE_CLOUDFLARE_CONCURRENCY", "2")
        monkeypatch.setenv("CACHE_CLOUDFLARE_STOP_ON_ERROR", "true")
        monkeypatch.setenv("CACHE_ENV", "prod")
        monkeypatch.setenv("CACHE_LOG_LEVEL", "warning")

        config = get_config("cache", 8020)

        assert config.service_name == "cache"
        assert config.port == 8020
        assert config.cache_api_key == "from-env"
        assert config.managed_purge_token == "proxy-token"
        assert config.cloudflare_concurrency == 2
        assert config.cloudflare_stop_on_error is True
        assert config.env == "prod"
        assert config.log_level == "warning"

    def test_field_names_are_accepted(self, monkeypatch):
        monkeypatch.delenv("CACHE_API_KEY", raising=False)

        assert get_config("cache", 8020, cache_api_key="override").cache_api_key == "override"


class TestErrors:
    """Test cases for service errors."""

    @pytest.mark.parametrize("error,status_code,code", [
        (AuthenticationError(), 401, "AUTHENTICATION_ERROR"),
        (PurgeConfigError('invalid purge config: "host" is required'), 400, "INVALID_PURGE_CONFIG"),
        (UnsupportedCDNError("varnish"), 500, "UNSUPPORTED_CDN"),
        (PurgeError("fastly", "boom"), 500, "PURGE_FAILED"),
    ])
    def test_status_and_code(self, error, status_code, code):
        assert error.status_code == status_code
        assert error.to_response().code == code

    def test_response_carries_details(self):
        error = PurgeError("akamai", "key purge failed", {"request_id": 1})

        assert error.provider == "akamai"
        assert error.to_response().model_dump() == {
            "code": "PURGE_FAILED",
            "message": "key purge failed",
            "details": {"request_id": 1},
        }
