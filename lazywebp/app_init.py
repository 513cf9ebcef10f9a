# =============================================================================
# File: app_init.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

from lazywebp.config.config_loader import ConfigLoader

APP_SETTINGS = ConfigLoader.get_app_settings()
