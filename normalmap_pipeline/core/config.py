"""Configuration module for the normal map pipeline."""
from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Dict, Mapping, MutableMapping, Optional

from .errors import InvalidInputError


BASE_DIR = Path(__file__).resolve().parent.parent

PATH_INPUT = BASE_DIR / "input"
PATH_OUTPUT = BASE_DIR / "normals"

DEFAULT_KERNEL = "sobel"
DEFAULT_STRENGTH = 2.0
DEFAULT_LARGE_DETAIL_SCALE = 0.25
BLUR_RADIUS = 5
BLUR_SIGMA = 1.0
OUTPUT_FORMAT = "JPEG"
OUTPUT_SUFFIX = "_normal"

SUPPORTED_EXTENSIONS = (".png", ".jpg", ".jpeg", ".bmp", ".tga", ".tif", ".tiff", ".webp")


class KernelType(str, Enum):
    """Convolution scheme used to estimate intensity derivatives."""

    SOBEL = "sobel"
    PREWITT = "prewitt"

    @classmethod
    def parse(cls, value: "KernelType | str") -> "KernelType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise InvalidInputError(f"Unknown kernel {value!r}; expected one of sobel, prewitt") from exc


@dataclass(frozen=True)
class GenerationConfig:
    """Options for a single normal map generation call."""

    kernel: KernelType = KernelType.SOBEL
    strength: float = DEFAULT_STRENGTH
    invert: bool = False
    keep_large_detail: bool = False
    large_detail_scale: float = DEFAULT_LARGE_DETAIL_SCALE
    workers: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "kernel", KernelType.parse(self.kernel))
        self.validate()

    def validate(self) -> None:
        """Raise :class:`InvalidInputError` when an option is out of range."""

        if math.isnan(self.strength) or self.strength <= 0:
            raise InvalidInputError(f"strength must be > 0, got {self.strength!r}")
        if math.isnan(self.large_detail_scale) or not 0.0 < self.large_detail_scale <= 1.0:
            raise InvalidInputError(
                f"large_detail_scale must lie in (0, 1], got {self.large_detail_scale!r}"
            )
        if int(self.workers) < 1:
            raise InvalidInputError(f"workers must be >= 1, got {self.workers!r}")

    @classmethod
    def from_mapping(cls, values: Mapping[str, object]) -> "GenerationConfig":
        """Build a config from a mapping, ignoring unknown keys."""

        known = {item.name for item in fields(cls)}
        return cls(**{key: value for key, value in values.items() if key in known})  # type: ignore[arg-type]


@dataclass
class PipelineConfig:
    """Runtime configuration for the batch normal map pipeline."""

    input_path: Path = PATH_INPUT
    output_path: Path = PATH_OUTPUT
    threads: int = 4
    blur_radius: float = BLUR_RADIUS
    blur_sigma: float = BLUR_SIGMA
    output_format: str = OUTPUT_FORMAT
    output_suffix: str = OUTPUT_SUFFIX
    log_file: Path = BASE_DIR / "processing.log"
    generation: GenerationConfig = field(default_factory=GenerationConfig)

    def as_dict(self) -> Dict[str, object]:
        """Return the configuration as a plain dictionary."""

        return {
            "PATH_INPUT": self.input_path,
            "PATH_OUTPUT": self.output_path,
            "THREADS": self.threads,
            "BLUR_RADIUS": self.blur_radius,
            "BLUR_SIGMA": self.blur_sigma,
            "OUTPUT_FORMAT": self.output_format,
            "OUTPUT_SUFFIX": self.output_suffix,
            "LOG_FILE": self.log_file,
            "GENERATION": self.generation,
        }


def build_config(overrides: Optional[Mapping[str, object]] = None) -> Dict[str, object]:
    """Create a configuration dictionary with optional overrides."""

    config = PipelineConfig()
    if overrides:
        mutable: MutableMapping[str, object] = config.as_dict()
        for key, value in overrides.items():
            if key in mutable:
                mutable[key] = value
        return dict(mutable)
    return config.as_dict()
