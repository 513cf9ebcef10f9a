# =============================================================================
# File: config_loader.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

import json
import os
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from lazywebp.config.appsettings import AppSettings
from lazywebp.exceptions import InvalidConfigError, MissingConfigError
from lazywebp.logger import configure_log_file, get_logger, set_debug_mode
from lazywebp.utils.log_sanitizer import sanitize_for_log

logger = get_logger("config_loader")

# (environment variable, section, field, parser)
ENV_OVERRIDES = [
    ("LAZYWEBP_ASSET_ROOT", "assets", "root", str),
    ("LAZYWEBP_ASSET_BASE_URL", "assets", "base_url", str),
    ("LAZYWEBP_MAX_DIMENSION", "conversion", "max_dimension", int),
    ("LAZYWEBP_MAX_PER_BATCH", "conversion", "max_per_batch", int),
    ("LAZYWEBP_QUALITY", "conversion", "quality", int),
    ("LAZYWEBP_MEMORY_LIMIT_MB", "conversion", "memory_limit_mb", int),
    ("LAZYWEBP_CACHE_TTL", "cache", "existence_ttl_seconds", int),
    ("LAZYWEBP_SERVER_HOST", "server", "host", str),
    ("LAZYWEBP_SERVER_PORT", "server", "port", int),
    ("LAZYWEBP_LOG_PATH", "logging", "folder", str),
]


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class ConfigLoader:
    __appsettings: Optional[AppSettings] = None

    @staticmethod
    def get_app_settings(force_reload: bool = False) -> AppSettings:
        """
        Loads AppSettings from appsettings.json and the environment-specific
        override in the same folder, then applies LAZYWEBP_* environment variables.
        """
        if ConfigLoader.__appsettings is not None and not force_reload:
            return ConfigLoader.__appsettings

        env = os.getenv("LAZYWEBP_ENV", "Production")
        data = ConfigLoader._load_config_data("appsettings.json", env)
        ConfigLoader._apply_env_overrides(data)

        try:
            settings = AppSettings(**data)
        except ValidationError as e:
            logger.error("Invalid application settings: %s", sanitize_for_log(str(e)))
            raise InvalidConfigError(f"Invalid application settings: {e}")

        settings.app.is_production = env.lower() in ["production", "enterprise"]
        debug_env = os.getenv("LAZYWEBP_DEBUG")
        if debug_env is not None:
            settings.app.debug = _parse_bool(debug_env)
        set_debug_mode(settings.app.debug)
        configure_log_file(settings.logging.folder, settings.logging.app_log_file)

        ConfigLoader._validate_paths(settings)

        ConfigLoader.__appsettings = settings
        logger.debug(
            "Loaded settings for %s (asset root %s)",
            env,
            sanitize_for_log(settings.assets.root),
        )
        return settings

    @staticmethod
    def _apply_env_overrides(data: Dict[str, Any]) -> None:
        for env_name, section, field, parser in ENV_OVERRIDES:
            raw = os.getenv(env_name)
            if raw is None:
                continue
            try:
                value = parser(raw)
            except ValueError:
                raise InvalidConfigError(
                    f"Environment variable {env_name} has an invalid value: {raw!r}"
                )
            data.setdefault(section, {})[field] = value

    @staticmethod
    def _validate_paths(settings: AppSettings) -> None:
        """Validate the asset root; it is only mandatory in production."""
        root = settings.assets.root
        if os.path.isdir(root):
            logger.info("Validated asset root: %s", sanitize_for_log(root))
            return

        if settings.app.is_production:
            logger.error(
                "Asset root does not exist: %s. Set LAZYWEBP_ASSET_ROOT.",
                sanitize_for_log(root),
            )
            raise MissingConfigError(f"Asset root does not exist: {root}")

        logger.warning(
            "Development mode: asset root %s does not exist yet", sanitize_for_log(root)
        )

    @staticmethod
    def _load_config_data(config_file_name: str, env: Optional[str] = None) -> dict:
        """
        Loads a config file and merges the environment-specific override if present.
        Performs a deep merge for nested config sections.
        """
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, config_file_name)

        logger.debug(f"Loading config from {config_file_name}")

        def deep_update(d: dict, u: dict) -> None:
            for k, v in u.items():
                if isinstance(v, dict) and isinstance(d.get(k), dict):
                    deep_update(d[k], v)
                else:
                    d[k] = v

        data = ConfigLoader._read_json(config_path, MissingConfigError)

        if env:
            name, ext = os.path.splitext(config_file_name)
            env_file = f"{name}.{env.lower()}{ext}"
            env_path = os.path.join(base_dir, env_file)
            if os.path.exists(env_path):
                deep_update(data, ConfigLoader._read_json(env_path, InvalidConfigError))
            else:
                logger.debug(
                    f"Environment-specific config file not found: {env_file}. Using base config."
                )

        return data

    @staticmethod
    def _read_json(path: str, missing_error: Callable[[str], Exception]) -> dict:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, FileNotFoundError) as e:
            logger.error("Config file not accessible %s: %s", sanitize_for_log(path), e)
            raise missing_error(f"Cannot access config file {path}: {e}")
        except (json.JSONDecodeError, ValueError) as e:
            logger.error(
                "Invalid config format in %s: %s",
                sanitize_for_log(path),
                sanitize_for_log(str(e)),
            )
            raise InvalidConfigError(f"Config file format error in {path}: {e}")

    @staticmethod
    def clear_cache() -> None:
        """Clear the cached settings so the next call reloads them."""
        ConfigLoader.__appsettings = None
