"""Convert RGB pixels into a scalar intensity field."""
from __future__ import annotations

import numpy as np
from PIL import Image

from ...core.utils_image import ensure_dimensions


def extract_intensity(image: Image.Image, invert: bool = False) -> np.ndarray:
    """Return the ``(H, W)`` float32 intensity of *image* in ``[0, 1]``.

    Intensity is the unweighted mean of the R, G and B channels. With
    *invert* the field stores ``1 - intensity`` so bright areas read as low.
    """

    ensure_dimensions(image)
    rgb = np.asarray(image.convert("RGB"), dtype=np.float32)
    intensity = rgb.sum(axis=2, dtype=np.float32) / np.float32(255 * 3)
    if invert:
        intensity = np.float32(1.0) - intensity
    return intensity
