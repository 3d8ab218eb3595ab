"""Three component vectors used to build and encode surface normals."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

RGBA = Tuple[int, int, int, int]


def encode_component(value: float) -> int:
    """Map a component in ``[-1, 1]`` to a byte in ``[0, 255]``."""

    return int(min(255.0, max(0.0, float(np.rint((value + 1.0) * 127.5)))))


@dataclass(frozen=True)
class Vector3:
    x: float
    y: float
    z: float

    @property
    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalized(self) -> "Vector3":
        """Return a unit-length copy; the zero vector maps to ``(0, 0, 1)``."""

        length = self.length
        if length == 0.0:
            return FLAT_NORMAL
        return Vector3(self.x / length, self.y / length, self.z / length)

    def to_rgba(self) -> RGBA:
        return (encode_component(self.x), encode_component(self.y), encode_component(self.z), 255)


FLAT_NORMAL = Vector3(0.0, 0.0, 1.0)


def normalize_field(dx: np.ndarray, dy: np.ndarray, dz: np.ndarray | float) -> np.ndarray:
    """Normalize per-pixel ``(dx, dy, dz)`` into an ``(H, W, 3)`` float64 array.

    Pixels whose vector has zero length receive :data:`FLAT_NORMAL`.
    """

    vectors = np.empty(dx.shape + (3,), dtype=np.float64)
    vectors[..., 0] = dx
    vectors[..., 1] = dy
    vectors[..., 2] = dz
    length = np.sqrt(np.sum(vectors * vectors, axis=-1, keepdims=True))
    degenerate = length[..., 0] == 0.0
    np.divide(vectors, length, out=vectors, where=~degenerate[..., None])
    if np.any(degenerate):
        vectors[degenerate] = (FLAT_NORMAL.x, FLAT_NORMAL.y, FLAT_NORMAL.z)
    return vectors


def encode_normals(vectors: np.ndarray) -> np.ndarray:
    """Encode unit vectors ``(H, W, 3)`` as an opaque ``(H, W, 4)`` uint8 map."""

    encoded = np.clip(np.rint((vectors + 1.0) * 127.5), 0, 255).astype(np.uint8)
    alpha = np.full(vectors.shape[:-1] + (1,), 255, dtype=np.uint8)
    return np.concatenate([encoded, alpha], axis=-1)
