"""Entry points turning texture images into tangent-space normal maps."""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

from PIL import Image

from ...core import config as defaults
from ...core.config import GenerationConfig
from ...core.utils_image import blur, encode, ensure_dimensions, from_rgba_array, load_image
from .builder import build_normal_map
from .detail import blend_large_detail

LOGGER = logging.getLogger("normalmap_pipeline.normal_map.generation")


def generate(image: Image.Image, config: Optional[GenerationConfig] = None) -> Image.Image:
    """Create an opaque RGBA normal map with the size of *image*.

    No blur or encoding is applied; see :func:`generate_bytes` for the full
    decode, generate, blur and encode sequence.
    """

    config = config or GenerationConfig()
    width, height = ensure_dimensions(image)
    started = time.perf_counter()

    normal_map = build_normal_map(image, config)
    if config.keep_large_detail:
        normal_map = blend_large_detail(image, normal_map, config)

    LOGGER.debug(
        "Generated %sx%s normal map (kernel=%s, strength=%s, invert=%s, large_detail=%s) in %.3fs",
        width,
        height,
        config.kernel.value,
        config.strength,
        config.invert,
        config.keep_large_detail,
        time.perf_counter() - started,
    )
    return from_rgba_array(normal_map)


def finalize(
    normal_map: Image.Image,
    *,
    blur_radius: float = defaults.BLUR_RADIUS,
    blur_sigma: float = defaults.BLUR_SIGMA,
    output_format: str = defaults.OUTPUT_FORMAT,
) -> bytes:
    """Blur *normal_map* and encode it to *output_format*."""

    return encode(blur(normal_map, blur_radius, blur_sigma), output_format)


def generate_bytes(
    data: bytes,
    config: Optional[GenerationConfig] = None,
    *,
    blur_radius: float = defaults.BLUR_RADIUS,
    blur_sigma: float = defaults.BLUR_SIGMA,
    output_format: str = defaults.OUTPUT_FORMAT,
) -> bytes:
    """Decode *data*, generate its normal map, blur and encode the result."""

    image = load_image(data)
    normal_map = generate(image, config)
    return finalize(normal_map, blur_radius=blur_radius, blur_sigma=blur_sigma, output_format=output_format)


def generate_file(
    path: Path | str,
    config: Optional[GenerationConfig] = None,
    *,
    blur_radius: float = defaults.BLUR_RADIUS,
    blur_sigma: float = defaults.BLUR_SIGMA,
    output_format: str = defaults.OUTPUT_FORMAT,
) -> bytes:
    """Read the texture at *path* and delegate to :func:`generate_bytes`."""

    data = Path(path).read_bytes()
    return generate_bytes(
        data,
        config,
        blur_radius=blur_radius,
        blur_sigma=blur_sigma,
        output_format=output_format,
    )
