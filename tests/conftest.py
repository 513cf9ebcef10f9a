# =============================================================================
# File: conftest.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

import logging
import os

import pytest
from PIL import Image

from lazywebp.config.appsettings import AppSettings, AssetConfig, ConversionConfig
from lazywebp.modules.shared_cache import InMemorySharedCache
from lazywebp.services.cache_registry import set_shared_cache


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


@pytest.fixture(autouse=True, scope="session")
def silence_noisy_loggers():
    """Keep expected conversion failures out of the test output."""
    noisy_loggers = [
        "lazywebp.error_handler",
        "lazywebp.config_loader",
        "lazywebp.codec_support",
    ]
    previous_levels = {}
    for name in noisy_loggers:
        logger = logging.getLogger(name)
        previous_levels[name] = logger.level
        logger.setLevel(logging.CRITICAL)

    yield

    for name, level in previous_levels.items():
        logging.getLogger(name).setLevel(level)


@pytest.fixture(autouse=True)
def reset_shared_cache_registry():
    set_shared_cache(None)
    yield
    set_shared_cache(None)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def shared_cache(clock):
    return InMemorySharedCache(clock=clock)


@pytest.fixture
def asset_root(tmp_path):
    root = tmp_path / "uploads"
    root.mkdir()
    return str(root)


@pytest.fixture
def settings(asset_root):
    return AppSettings(
        assets=AssetConfig(root=asset_root, base_url="/uploads/"),
        conversion=ConversionConfig(memory_limit_mb=-1),
    )


@pytest.fixture
def make_image(asset_root):
    """Write an image under the asset root and return its absolute path."""

    def _make(name, size=(64, 48), mode="RGB", fmt=None, color=None, root=None):
        path = os.path.join(root or asset_root, name)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        if color is None:
            color = 0 if mode in ("1", "L", "P") else (200, 120, 40, 255)[: len(mode)]
        Image.new(mode, size, color).save(path, format=fmt)
        return path

    return _make
