"""Tests for the large detail soft-light blend."""
from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from normalmap_pipeline.core.config import GenerationConfig
from normalmap_pipeline.core.errors import InvalidInputError
from normalmap_pipeline.modules.normal_map.builder import build_normal_map
from normalmap_pipeline.modules.normal_map.detail import (
    blend_large_detail,
    blend_soft_light,
    large_detail_size,
)


def test_soft_light_dark_blend_layer() -> None:
    assert int(blend_soft_light(200, 100)) == 128


def test_soft_light_light_blend_layer() -> None:
    assert int(blend_soft_light(50, 200)) == 183


def test_soft_light_is_elementwise() -> None:
    base = np.array([[200, 50, 0, 255]], dtype=np.uint8)
    blend = np.array([[100, 200, 0, 255]], dtype=np.uint8)
    result = blend_soft_light(base, blend)
    assert result.dtype == np.uint8
    np.testing.assert_array_equal(result, [[128, 183, 0, 255]])


def test_soft_light_output_stays_in_byte_range() -> None:
    values = np.arange(256, dtype=np.uint8)
    base, blend = np.meshgrid(values, values)
    result = blend_soft_light(base, blend).astype(np.int32)
    assert result.min() >= 0
    assert result.max() <= 255


def test_large_detail_size_floors() -> None:
    assert large_detail_size(100, 41, 0.25) == (25, 10)
    assert large_detail_size(7, 3, 1.0) == (7, 3)


@pytest.mark.parametrize("size, factor", [((10, 10), 0.05), ((3, 100), 0.25)])
def test_large_detail_size_rejects_empty_pass(size: tuple[int, int], factor: float) -> None:
    with pytest.raises(InvalidInputError):
        large_detail_size(size[0], size[1], factor)


@pytest.mark.parametrize("factor", [0.0, -0.5, 1.5])
def test_large_detail_size_rejects_out_of_range_scale(factor: float) -> None:
    with pytest.raises(InvalidInputError):
        large_detail_size(16, 16, factor)


def test_uniform_image_stays_flat_after_blend() -> None:
    source = Image.new("RGB", (12, 8), (200, 180, 160))
    config = GenerationConfig(keep_large_detail=True, large_detail_scale=0.5)
    base = build_normal_map(source, config)
    blended = blend_large_detail(source, base, config)
    assert blended.shape == (8, 12, 4)
    assert (blended.reshape(-1, 4) == (128, 128, 255, 255)).all()


def test_blend_keeps_alpha_opaque_and_changes_detail() -> None:
    rng = np.random.default_rng(3)
    pixels = rng.integers(0, 256, size=(16, 16, 3), dtype=np.uint8)
    source = Image.fromarray(pixels, mode="RGB")
    config = GenerationConfig(keep_large_detail=True, large_detail_scale=0.5)
    base = build_normal_map(source, config)
    blended = blend_large_detail(source, base, config)
    assert (blended[..., 3] == 255).all()
    assert not np.array_equal(blended, base)


def test_blend_rejects_mismatched_base() -> None:
    source = Image.new("RGB", (8, 8), (1, 2, 3))
    config = GenerationConfig(keep_large_detail=True, large_detail_scale=0.5)
    with pytest.raises(InvalidInputError):
        blend_large_detail(source, np.zeros((4, 4, 4), dtype=np.uint8), config)


def test_alpha_does_not_create_relief_in_large_detail_pass() -> None:
    source = Image.new("RGBA", (16, 16), (180, 180, 180, 255))
    for y in range(16):
        for x in range(8):
            source.putpixel((x, y), (180, 180, 180, 0))
    config = GenerationConfig(keep_large_detail=True, large_detail_scale=0.5)
    base = build_normal_map(source, config)
    blended = blend_large_detail(source, base, config)
    assert (blended.reshape(-1, 4) == (128, 128, 255, 255)).all()
