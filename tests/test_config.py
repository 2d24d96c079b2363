"""Tests for configuration loading and validation."""

import dataclasses

import pytest

from salon_admin.config import ApiConfig, AppConfig, BookingConfig, _validate_config


def config_with(api=None, booking=None) -> AppConfig:
    return dataclasses.replace(
        AppConfig(), api=api or ApiConfig(), booking=booking or BookingConfig()
    )


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        _validate_config(AppConfig())  # should not raise

    def test_root_url_joins_prefix(self):
        api = ApiConfig(base_url="https://salon.test/", api_prefix="/api")
        assert api.root_url == "https://salon.test/api"

    def test_base_url_requires_scheme(self):
        with pytest.raises(ValueError, match="SALON_API_BASE_URL"):
            _validate_config(config_with(api=ApiConfig(base_url="salon.test")))

    def test_prefix_requires_slash(self):
        with pytest.raises(ValueError, match="SALON_API_PREFIX"):
            _validate_config(config_with(api=ApiConfig(api_prefix="api")))

    @pytest.mark.parametrize("timeout", [0.0, -1.0])
    def test_timeout_must_be_positive(self, timeout):
        with pytest.raises(ValueError, match="SALON_API_TIMEOUT"):
            _validate_config(config_with(api=ApiConfig(timeout_sec=timeout)))

    def test_unknown_timezone(self):
        with pytest.raises(ValueError, match="SALON_TIMEZONE"):
            _validate_config(config_with(booking=BookingConfig(timezone="Mars/Olympus")))

    def test_config_is_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            AppConfig().log_level = "DEBUG"
