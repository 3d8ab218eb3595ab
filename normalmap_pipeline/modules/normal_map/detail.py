"""Blend a low-frequency normal pass into the base map.

The source is shrunk by ``large_detail_scale``, turned into a normal map,
enlarged back to full size and combined with the base map channel by channel
using a soft-light operator. The enlarged pass carries the broad relief while
the base map keeps the fine gradients.
"""
from __future__ import annotations

import logging
import math
from typing import Tuple

import numpy as np
from PIL import Image

from ...core.config import GenerationConfig
from ...core.errors import InvalidInputError
from ...core.utils_image import ensure_dimensions, from_rgba_array, scale, to_rgba_array
from .builder import build_normal_map

LOGGER = logging.getLogger("normalmap_pipeline.normal_map.detail")


def large_detail_size(width: int, height: int, factor: float) -> Tuple[int, int]:
    """Return the floored ``(width, height)`` of the low-frequency pass."""

    if not 0.0 < factor <= 1.0:
        raise InvalidInputError(f"large_detail_scale must lie in (0, 1], got {factor!r}")
    small_width = int(math.floor(width * factor))
    small_height = int(math.floor(height * factor))
    if small_width <= 0 or small_height <= 0:
        raise InvalidInputError(
            f"large_detail_scale {factor} reduces {width}x{height} to {small_width}x{small_height}"
        )
    return small_width, small_height


def blend_soft_light(base: np.ndarray | int, blend: np.ndarray | int) -> np.ndarray:
    """Soft-light *blend* over *base*; both are byte values, result is uint8."""

    a = np.asarray(base, dtype=np.float64)
    b = np.asarray(blend, dtype=np.float64)
    dark = (a + 127.5) * b / 255.0
    light = 255.0 - (382.5 - a) * (255.0 - b) / 255.0
    result = np.where(2.0 * b < 255.0, dark, light)
    return np.clip(np.rint(result), 0, 255).astype(np.uint8)


def blend_large_detail(source: Image.Image, base_map: np.ndarray, config: GenerationConfig) -> np.ndarray:
    """Return *base_map* merged with the low-frequency normals of *source*."""

    width, height = ensure_dimensions(source)
    if base_map.shape[:2] != (height, width):
        raise InvalidInputError(
            f"Base map shape {base_map.shape[:2]} does not match source size {width}x{height}"
        )
    small_size = large_detail_size(width, height, config.large_detail_scale)
    LOGGER.debug("Large detail pass at %sx%s", *small_size)

    # Resample RGB only; Pillow premultiplies alpha into RGBA channels.
    small_source = scale(source.convert("RGB"), *small_size)
    small_map = build_normal_map(small_source, config)
    coarse = to_rgba_array(scale(from_rgba_array(small_map), width, height))

    blended = np.empty_like(base_map)
    blended[..., :3] = blend_soft_light(base_map[..., :3], coarse[..., :3])
    blended[..., 3] = 255
    return blended
