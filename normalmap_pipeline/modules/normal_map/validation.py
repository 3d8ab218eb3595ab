"""Sanity checks for encoded normal maps."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

import logging
import numpy as np
from PIL import Image

from ...core.utils_image import to_rgba_array

LOGGER = logging.getLogger("normalmap_pipeline.normal_map.validation")

# Byte quantisation alone moves a unit vector's length by up to ~0.007.
DEFAULT_LENGTH_TOLERANCE = 0.02


@dataclass
class ValidationReport:
    issues: Dict[str, List[str]] = field(default_factory=dict)

    def add(self, check: str, message: str) -> None:
        self.issues.setdefault(check, []).append(message)

    def has_critical_issues(self) -> bool:
        return any(self.issues.values())

    def passes_all_critical(self) -> bool:
        return not self.has_critical_issues()


def decode_normals(image: Image.Image) -> np.ndarray:
    """Decode the RGB channels of *image* back to ``[-1, 1]`` vectors."""

    rgb = to_rgba_array(image)[..., :3].astype(np.float64)
    return rgb / 127.5 - 1.0


def validate_normal_map(
    image: Image.Image,
    tolerance: float = DEFAULT_LENGTH_TOLERANCE,
    *,
    check_length: bool = True,
) -> ValidationReport:
    """Check opacity, unit length and orientation of every encoded normal.

    Soft-light blending does not renormalise, so callers validating a map with
    a large detail pass should disable *check_length*.
    """

    report = ValidationReport()
    alpha = to_rgba_array(image)[..., 3]
    transparent = int(np.count_nonzero(alpha != 255))
    if transparent:
        report.add("opaque", f"{transparent} pixel(s) are not fully opaque")

    normals = decode_normals(image)
    length = np.linalg.norm(normals, axis=-1)
    off_unit = int(np.count_nonzero(np.abs(length - 1.0) > tolerance))
    if check_length and off_unit:
        report.add("unit_length", f"{off_unit} normal(s) deviate from unit length by more than {tolerance}")

    inward = int(np.count_nonzero(normals[..., 2] < 0.0))
    if inward:
        report.add("facing", f"{inward} normal(s) point into the surface")

    if report.has_critical_issues():
        LOGGER.debug("Normal map validation issues: %s", report.issues)
    return report
