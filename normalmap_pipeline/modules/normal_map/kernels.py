"""Sobel and Prewitt gradient estimation over an intensity field."""
from __future__ import annotations

import logging
from typing import Dict, NamedTuple

import numpy as np

from ...core.config import KernelType
from ...core.errors import InvalidInputError
from ...core.utils_parallel import run_parallel, split_range
from .vector3 import Vector3, encode_normals, normalize_field

LOGGER = logging.getLogger("normalmap_pipeline.normal_map.kernels")

# Weight applied to the edge-adjacent neighbour of each side sum.
_SIDE_WEIGHTS: Dict[KernelType, float] = {
    KernelType.SOBEL: 2.0,
    KernelType.PREWITT: 1.0,
}


class Neighborhood(NamedTuple):
    """The eight ring samples around a pixel; the centre is never read."""

    top_left: np.ndarray
    top: np.ndarray
    top_right: np.ndarray
    right: np.ndarray
    bottom_right: np.ndarray
    bottom: np.ndarray
    bottom_left: np.ndarray
    left: np.ndarray


def clamp_index(index: int, size: int) -> int:
    """Clamp *index* into ``[0, size - 1]``."""

    if index >= size:
        return size - 1
    if index < 0:
        return 0
    return index


def _gradients(ring: Neighborhood, kernel: KernelType):
    weight = _SIDE_WEIGHTS[kernel]
    top_side = ring.top_left + weight * ring.top + ring.top_right
    bottom_side = ring.bottom_left + weight * ring.bottom + ring.bottom_right
    right_side = ring.top_right + weight * ring.right + ring.bottom_right
    left_side = ring.top_left + weight * ring.left + ring.bottom_left

    d_y = right_side - left_side
    if kernel is KernelType.SOBEL:
        d_x = bottom_side - top_side
    else:
        # Prewitt keeps the opposite vertical sign.
        d_x = top_side - bottom_side
    return d_x, d_y


def _check_inputs(field: np.ndarray, strength: float) -> None:
    if field.ndim != 2 or field.shape[0] == 0 or field.shape[1] == 0:
        raise InvalidInputError(f"Intensity field must be a non-empty 2D array, got shape {field.shape}")
    if np.isnan(strength) or strength <= 0:
        raise InvalidInputError(f"strength must be > 0, got {strength!r}")


def normal_at(field: np.ndarray, x: int, y: int, kernel: KernelType | str, strength: float) -> Vector3:
    """Return the unit normal at column *x*, row *y* of *field*."""

    kernel = KernelType.parse(kernel)
    _check_inputs(field, strength)
    height, width = field.shape

    def sample(dx: int, dy: int) -> float:
        return float(field[clamp_index(y + dy, height), clamp_index(x + dx, width)])

    ring = Neighborhood(
        top_left=sample(-1, -1),
        top=sample(0, -1),
        top_right=sample(1, -1),
        right=sample(1, 0),
        bottom_right=sample(1, 1),
        bottom=sample(0, 1),
        bottom_left=sample(-1, 1),
        left=sample(-1, 0),
    )
    d_x, d_y = _gradients(ring, kernel)
    return Vector3(d_x, d_y, 1.0 / strength).normalized()


def _band_normals(padded: np.ndarray, start: int, stop: int, width: int, kernel: KernelType, d_z: float) -> np.ndarray:
    """Encode rows ``start:stop`` using the edge-padded field *padded*."""

    # Row r of the image is row r + 1 of the padded field.
    rows = slice(start, stop)
    below = slice(start + 2, stop + 2)
    centre = slice(start + 1, stop + 1)
    ring = Neighborhood(
        top_left=padded[rows, 0:width],
        top=padded[rows, 1 : width + 1],
        top_right=padded[rows, 2 : width + 2],
        right=padded[centre, 2 : width + 2],
        bottom_right=padded[below, 2 : width + 2],
        bottom=padded[below, 1 : width + 1],
        bottom_left=padded[below, 0:width],
        left=padded[centre, 0:width],
    )
    d_x, d_y = _gradients(ring, kernel)
    return encode_normals(normalize_field(d_x, d_y, d_z))


def compute_normal_map(
    field: np.ndarray,
    kernel: KernelType | str,
    strength: float,
    workers: int = 1,
) -> np.ndarray:
    """Return the encoded ``(H, W, 4)`` uint8 normal map of *field*.

    The field is padded once with its own border values so that every pixel,
    including those on the edges, sees eight clamped neighbours. With
    ``workers > 1`` row bands are computed concurrently; the result does not
    depend on the number of workers.
    """

    kernel = KernelType.parse(kernel)
    _check_inputs(field, strength)
    height, width = field.shape
    padded = np.pad(np.asarray(field, dtype=np.float64), 1, mode="edge")
    d_z = 1.0 / strength

    spans = split_range(height, workers)
    LOGGER.debug("Computing %s normals for %dx%d field in %d band(s)", kernel.value, width, height, len(spans))
    bands = run_parallel(
        lambda span: _band_normals(padded, span[0], span[1], width, kernel, d_z),
        spans,
        max_workers=len(spans),
    )
    return np.concatenate(bands, axis=0)
