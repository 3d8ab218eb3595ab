"""Tangent-space normal map generation from texture intensity."""
from __future__ import annotations

from .detail import blend_soft_light, large_detail_size
from .generation import generate, generate_bytes, generate_file
from .kernels import compute_normal_map, normal_at
from .validation import validate_normal_map
from .vector3 import Vector3

__all__ = [
    "blend_soft_light",
    "compute_normal_map",
    "generate",
    "generate_bytes",
    "generate_file",
    "large_detail_size",
    "normal_at",
    "validate_normal_map",
    "Vector3",
]
