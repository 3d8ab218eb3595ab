"""Build a base normal map at source resolution."""
from __future__ import annotations

import numpy as np
from PIL import Image

from ...core.config import GenerationConfig
from .intensity import extract_intensity
from .kernels import compute_normal_map


def build_normal_map(image: Image.Image, config: GenerationConfig) -> np.ndarray:
    """Extract the intensity of *image* and encode its gradients as normals."""

    field = extract_intensity(image, invert=config.invert)
    return compute_normal_map(field, config.kernel, config.strength, workers=config.workers)
