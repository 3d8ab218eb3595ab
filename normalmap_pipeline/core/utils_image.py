"""Image backend helpers: decoding, pixel access, resampling, blur and encoding."""
from __future__ import annotations

import io
import logging

import numpy as np
from PIL import Image, UnidentifiedImageError
from scipy.ndimage import gaussian_filter

from .errors import DecodeError, InvalidInputError

LOGGER = logging.getLogger("normalmap_pipeline.image")

try:  # pragma: no cover - Pillow compatibility shim
    _RESAMPLING = Image.Resampling
except AttributeError:  # pragma: no cover - older Pillow
    _RESAMPLING = Image

DOWNSCALE_FILTER = _RESAMPLING.BOX
UPSCALE_FILTER = _RESAMPLING.BILINEAR


def load_image(data: bytes) -> Image.Image:
    """Decode *data* into a fully loaded :class:`~PIL.Image.Image`."""

    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as exc:
        raise DecodeError(f"Unable to decode image data ({len(data)} bytes): {exc}") from exc
    return image


def ensure_dimensions(image: Image.Image) -> tuple[int, int]:
    """Return ``(width, height)`` or raise for degenerate images."""

    width, height = image.size
    if width <= 0 or height <= 0:
        raise InvalidInputError(f"Image has degenerate size {width}x{height}")
    return width, height


def to_rgba_array(image: Image.Image) -> np.ndarray:
    """Return the pixels of *image* as a dense ``(H, W, 4)`` uint8 array."""

    return np.asarray(image.convert("RGBA"), dtype=np.uint8)


def from_rgba_array(array: np.ndarray) -> Image.Image:
    """Wrap an ``(H, W, 4)`` uint8 array as an RGBA image."""

    rgba = np.ascontiguousarray(array, dtype=np.uint8)
    if rgba.ndim != 3 or rgba.shape[2] != 4:
        raise InvalidInputError(f"Expected an (H, W, 4) array, got shape {rgba.shape}")
    return Image.fromarray(rgba, mode="RGBA")


def scale(image: Image.Image, width: int, height: int) -> Image.Image:
    """Resample *image* to ``width x height`` deterministically.

    Shrinking uses a box filter so every source pixel contributes to the
    average; enlarging uses bilinear interpolation, which softens the result.
    """

    if width <= 0 or height <= 0:
        raise InvalidInputError(f"Cannot scale to degenerate size {width}x{height}")
    if (width, height) == image.size:
        return image.copy()
    shrinking = width * height < image.size[0] * image.size[1]
    resample = DOWNSCALE_FILTER if shrinking else UPSCALE_FILTER
    LOGGER.debug("Scaling %sx%s -> %sx%s", image.size[0], image.size[1], width, height)
    return image.resize((width, height), resample=resample)


def blur(image: Image.Image, radius: float, sigma: float) -> Image.Image:
    """Gaussian blur *image* over its spatial axes.

    ``radius`` bounds the kernel extent in pixels; ``0`` lets the filter pick
    its default extent of four standard deviations. ``sigma <= 0`` is a no-op.
    """

    if radius < 0 or sigma < 0:
        raise InvalidInputError(f"Blur radius and sigma must be >= 0, got {radius!r}, {sigma!r}")
    rgba = image.convert("RGBA")
    if sigma == 0:
        return rgba.copy()
    truncate = float(radius) / float(sigma) if radius > 0 else 4.0
    array = np.asarray(rgba, dtype=np.float32)
    blurred = gaussian_filter(array, sigma=(sigma, sigma, 0.0), truncate=truncate, mode="nearest")
    result = np.clip(np.rint(blurred), 0, 255).astype(np.uint8)
    return Image.fromarray(result, mode="RGBA")


def encode(image: Image.Image, format: str) -> bytes:
    """Encode *image* with Pillow and return the raw bytes."""

    fmt = format.upper()
    if fmt == "JPG":
        fmt = "JPEG"
    target = image.convert("RGB") if fmt == "JPEG" else image
    buffer = io.BytesIO()
    try:
        target.save(buffer, format=fmt)
    except KeyError as exc:
        raise InvalidInputError(f"Unsupported output format {format!r}") from exc
    return buffer.getvalue()
