# =============================================================================
# File: test_pipeline.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

"""End-to-end request cycles through DerivativePipeline."""

import os
from unittest.mock import patch

import pytest
from PIL import Image, features

from lazywebp.config.appsettings import AppSettings, AssetConfig, ConversionConfig
from lazywebp.services.pipeline import DerivativePipeline
from lazywebp.utils.memory_guard import MemoryGuard

requires_webp = pytest.mark.skipif(
    not features.check("webp"), reason="Pillow built without WebP support"
)


@pytest.fixture
def new_request(settings, shared_cache):
    """Each call simulates a new request sharing the same cross-request cache."""

    def _new(app_settings=None):
        return DerivativePipeline(
            app_settings or settings, shared_cache, memory_guard=MemoryGuard(limit_mb=-1)
        )

    return _new


@requires_webp
class TestRequestCycle:
    def test_first_request_converts_second_serves(self, new_request, make_image, asset_root):
        make_image("photo.jpg", size=(800, 600))
        reference = "/uploads/photo.jpg"

        first = new_request()
        assert first.observe(reference) is True
        assert first.resolve(reference, True) == reference
        report = first.finish()

        assert report.converted == 1
        with Image.open(os.path.join(asset_root, "photo.webp")) as derivative:
            assert derivative.format == "WEBP"

        second = new_request()
        with patch("os.path.isfile", side_effect=AssertionError("filesystem touched")):
            assert second.observe(reference) is False
            assert second.resolve(reference, True) == "/uploads/photo.webp"
        assert second.queue.is_empty()

    def test_empty_base_url(self, asset_root, shared_cache, make_image):
        make_image("photo.jpg", size=(800, 600))
        settings = AppSettings(
            assets=AssetConfig(root=asset_root, base_url=""),
            conversion=ConversionConfig(memory_limit_mb=-1),
        )

        pipeline = DerivativePipeline(settings, shared_cache)
        assert pipeline.observe("photo.jpg") is True
        assert pipeline.finish().converted == 1
        assert DerivativePipeline(settings, shared_cache).resolve("photo.jpg", True) == "photo.webp"

    def test_failure_rediscovered_next_request(self, new_request, settings, make_image):
        make_image("wide.jpg", size=(120, 10))
        strict = settings.model_copy(
            update={"conversion": settings.conversion.model_copy(update={"max_dimension": 100})}
        )

        first = new_request(strict)
        assert first.observe("/uploads/wide.jpg") is True
        report = first.finish()
        assert report.failed == 1
        assert first.queue.is_empty()

        assert new_request(strict).observe("/uploads/wide.jpg") is True

    def test_srcset_observed_and_resolved(self, new_request, make_image):
        make_image("a.jpg")
        make_image("a-300x200.jpg", size=(30, 20))
        sources = {
            300: {"url": "/uploads/a-300x200.jpg", "descriptor": "w", "value": 300},
            640: {"url": "/uploads/a.jpg", "descriptor": "w", "value": 640},
        }

        first = new_request()
        assert first.observe_srcset(sources, source_id=12) == 2
        assert first.finish().converted == 2

        resolved = new_request().resolve_srcset(sources, True)
        assert resolved[300]["url"] == "/uploads/a-300x200.webp"
        assert resolved[640]["url"] == "/uploads/a.webp"


class TestObserve:
    def test_duplicate_references_queued_once(self, new_request, make_image):
        make_image("photo.jpg")
        pipeline = new_request()
        assert pipeline.observe("/uploads/photo.jpg", source_id=1) is True
        assert pipeline.observe("/uploads/photo.jpg", source_id=1) is False
        assert pipeline.queue.size() == 1

    def test_invalid_references_ignored(self, new_request, make_image):
        make_image("photo.jpg")
        pipeline = new_request()
        for reference in [
            None,
            "",
            "/uploads/../photo.jpg",
            "/static/photo.jpg",
            "/uploads/anim.gif",
            "/uploads/missing.jpg",
        ]:
            assert pipeline.observe(reference) is False
        assert pipeline.queue.is_empty()

    def test_internal_error_contained(self, new_request, make_image):
        make_image("photo.jpg")
        pipeline = new_request()
        with patch.object(
            pipeline.existence_cache, "needs_conversion", side_effect=RuntimeError("boom")
        ):
            assert pipeline.observe("/uploads/photo.jpg") is False

    def test_resolve_error_returns_original(self, new_request):
        pipeline = new_request()
        with patch.object(pipeline.substitution, "resolve", side_effect=RuntimeError("boom")):
            assert pipeline.resolve("/uploads/photo.jpg", True) == "/uploads/photo.jpg"

    def test_finish_with_empty_queue(self, new_request):
        report = new_request().finish()
        assert report.attempted == 0
        assert report.remaining == 0

    def test_queue_overflow_dropped(self, new_request, settings, make_image):
        small = settings.model_copy(
            update={"conversion": settings.conversion.model_copy(update={"max_per_batch": 1})}
        )
        pipeline = new_request(small)
        for i in range(3):
            make_image(f"{i}.jpg")
        results = [pipeline.observe(f"/uploads/{i}.jpg") for i in range(3)]
        assert results == [True, True, False]
