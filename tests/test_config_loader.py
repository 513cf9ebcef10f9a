# =============================================================================
# File: test_config_loader.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

"""Tests for settings loading and environment overrides."""

import logging

import pytest
from pydantic import ValidationError

from lazywebp.config.appsettings import AppSettings, AssetConfig, CacheConfig, ConversionConfig
from lazywebp.config.config_loader import ENV_OVERRIDES, ConfigLoader
from lazywebp.exceptions import InvalidConfigError, MissingConfigError
from lazywebp.logger import is_debug_mode, set_debug_mode


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for env_name, *_ in ENV_OVERRIDES:
        monkeypatch.delenv(env_name, raising=False)
    monkeypatch.delenv("LAZYWEBP_DEBUG", raising=False)
    monkeypatch.delenv("LAZYWEBP_ENV", raising=False)
    ConfigLoader.clear_cache()
    yield
    ConfigLoader.clear_cache()
    set_debug_mode(False)


class TestConfigLoader:
    def test_production_defaults(self, monkeypatch, asset_root):
        monkeypatch.setenv("LAZYWEBP_ASSET_ROOT", asset_root)

        settings = ConfigLoader.get_app_settings()

        assert settings.app.is_production is True
        assert settings.app.debug is False
        assert settings.assets.root == asset_root
        assert settings.assets.base_url == "/uploads/"
        assert settings.conversion.max_dimension == 3000
        assert settings.conversion.max_per_batch == 5
        assert settings.conversion.quality == 90
        assert settings.conversion.allowed_mime_types == ["image/jpeg", "image/png"]
        assert settings.cache.existence_ttl_seconds == 300

    def test_development_overrides_merged(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LAZYWEBP_ENV", "Development")
        monkeypatch.setenv("LAZYWEBP_ASSET_ROOT", str(tmp_path / "not-created-yet"))

        settings = ConfigLoader.get_app_settings()

        assert settings.app.is_production is False
        assert settings.app.debug is True
        assert is_debug_mode() is True
        assert settings.conversion.memory_limit_mb == -1
        assert settings.cache.existence_ttl_seconds == 30
        # Untouched keys come from the base file
        assert settings.conversion.max_dimension == 3000

    def test_missing_root_fatal_in_production(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LAZYWEBP_ASSET_ROOT", str(tmp_path / "missing"))
        with pytest.raises(MissingConfigError):
            ConfigLoader.get_app_settings()

    def test_environment_overrides(self, monkeypatch, asset_root):
        monkeypatch.setenv("LAZYWEBP_ASSET_ROOT", asset_root)
        monkeypatch.setenv("LAZYWEBP_ASSET_BASE_URL", "/media")
        monkeypatch.setenv("LAZYWEBP_MAX_DIMENSION", "1024")
        monkeypatch.setenv("LAZYWEBP_MAX_PER_BATCH", "3")
        monkeypatch.setenv("LAZYWEBP_QUALITY", "150")
        monkeypatch.setenv("LAZYWEBP_DEBUG", "true")

        settings = ConfigLoader.get_app_settings()

        assert settings.assets.base_url == "/media/"
        assert settings.conversion.max_dimension == 1024
        assert settings.conversion.max_per_batch == 3
        assert settings.conversion.quality == 100
        assert settings.app.debug is True

    def test_unparseable_override(self, monkeypatch, asset_root):
        monkeypatch.setenv("LAZYWEBP_ASSET_ROOT", asset_root)
        monkeypatch.setenv("LAZYWEBP_MAX_DIMENSION", "big")
        with pytest.raises(InvalidConfigError):
            ConfigLoader.get_app_settings()

    def test_out_of_range_override(self, monkeypatch, asset_root):
        monkeypatch.setenv("LAZYWEBP_ASSET_ROOT", asset_root)
        monkeypatch.setenv("LAZYWEBP_MAX_DIMENSION", "0")
        with pytest.raises(InvalidConfigError):
            ConfigLoader.get_app_settings()

    def test_zero_existence_ttl_rejected(self, monkeypatch, asset_root):
        monkeypatch.setenv("LAZYWEBP_ASSET_ROOT", asset_root)
        monkeypatch.setenv("LAZYWEBP_CACHE_TTL", "0")
        with pytest.raises(InvalidConfigError):
            ConfigLoader.get_app_settings()

    def test_settings_cached(self, monkeypatch, asset_root):
        monkeypatch.setenv("LAZYWEBP_ASSET_ROOT", asset_root)
        first = ConfigLoader.get_app_settings()
        assert ConfigLoader.get_app_settings() is first
        assert ConfigLoader.get_app_settings(force_reload=True) is not first

    def test_log_folder_adds_file_handler(self, monkeypatch, asset_root, tmp_path):
        monkeypatch.setenv("LAZYWEBP_ASSET_ROOT", asset_root)
        monkeypatch.setenv("LAZYWEBP_LOG_PATH", str(tmp_path / "logs"))

        settings = ConfigLoader.get_app_settings()

        package_logger = logging.getLogger("lazywebp")
        handlers = [h for h in package_logger.handlers if isinstance(h, logging.FileHandler)]
        try:
            assert settings.logging.folder == str(tmp_path / "logs")
            assert str(tmp_path / "logs" / "lazywebp.log") in [h.baseFilename for h in handlers]
        finally:
            for handler in handlers:
                package_logger.removeHandler(handler)
                handler.close()


class TestSettingsModels:
    def test_quality_clamped(self):
        assert ConversionConfig(quality=-5).quality == 0
        assert ConversionConfig(quality=101).quality == 100
        assert ConversionConfig(quality="75").quality == 75

    def test_extensions_normalized(self):
        config = ConversionConfig(source_extensions=[".JPG", "Png"], target_extension=".WEBP")
        assert config.source_extensions == ["jpg", "png"]
        assert config.target_extension == "webp"

    def test_base_url_trailing_slash(self):
        assert AssetConfig(base_url="/media").base_url == "/media/"
        assert AssetConfig(base_url="").base_url == ""

    def test_defaults(self):
        settings = AppSettings()
        assert settings.conversion.batch_size == 5
        assert settings.conversion.advisory_locking is False
        assert settings.conversion.target_format == "WEBP"

    def test_existence_ttl_must_be_positive(self):
        assert CacheConfig(existence_ttl_seconds=1).existence_ttl_seconds == 1
        with pytest.raises(ValidationError):
            CacheConfig(existence_ttl_seconds=0)
        with pytest.raises(ValidationError):
            CacheConfig(existence_ttl_seconds=-30)
