"""Command line interface for the normal map pipeline."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .core import config
from .core.errors import NormalMapError
from .core.utils_image import load_image
from .core.utils_io import SafeFileManager, list_images
from .core.utils_parallel import run_parallel
from .modules.normal_map.generation import finalize, generate
from .modules.normal_map.validation import validate_normal_map

LOGGER = logging.getLogger("normalmap_pipeline.main_normalmap")

_EXTENSIONS = {"JPEG": ".jpg", "PNG": ".png", "BMP": ".bmp", "TIFF": ".tif", "WEBP": ".webp", "TGA": ".tga"}


class BoolAction(argparse.Action):
    """Robust boolean flag parser supporting affirmative and negative forms."""

    def __call__(self, parser, namespace, values, option_string=None):  # type: ignore[override]
        if values is None:
            setattr(namespace, self.dest, True)
            return
        normalized = str(values).strip().lower()
        if normalized in {"1", "y", "yes", "t", "true", "on"}:
            setattr(namespace, self.dest, True)
        elif normalized in {"0", "n", "no", "f", "false", "off"}:
            setattr(namespace, self.dest, False)
        else:
            raise argparse.ArgumentTypeError(f"Invalid boolean for {option_string}: {values!r}")


def _configure_logging(log_path: Path) -> None:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s", "%Y-%m-%d %H:%M:%S")
    file_handler = logging.FileHandler(log_path, encoding="utf-8", delay=True)
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    logging.basicConfig(level=logging.INFO, handlers=[file_handler, console_handler])


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate tangent-space normal maps from textures")
    parser.add_argument("--input", type=Path, default=config.PATH_INPUT, help="Texture file or directory of textures")
    parser.add_argument("--output", type=Path, default=config.PATH_OUTPUT, help="Directory to write normal maps")
    parser.add_argument(
        "--kernel",
        choices=[kernel.value for kernel in config.KernelType],
        default=config.DEFAULT_KERNEL,
        help="Gradient kernel (default: sobel)",
    )
    parser.add_argument("--strength", type=float, default=config.DEFAULT_STRENGTH, help="Normal strength; larger is flatter")
    parser.add_argument(
        "--invert",
        nargs="?",
        default=False,
        action=BoolAction,
        help="Treat bright pixels as low (default: false)",
    )
    parser.add_argument(
        "--keep-large-detail",
        nargs="?",
        default=False,
        action=BoolAction,
        help="Blend in a low-resolution pass to keep broad relief (default: false)",
    )
    parser.add_argument(
        "--no-keep-large-detail",
        dest="keep_large_detail",
        action="store_false",
        help="Disable the large detail pass",
    )
    parser.add_argument(
        "--large-detail-scale",
        type=float,
        default=config.DEFAULT_LARGE_DETAIL_SCALE,
        help="Size factor of the large detail pass, in (0, 1]",
    )
    parser.add_argument("--blur-radius", type=float, default=config.BLUR_RADIUS, help="Final blur radius in pixels")
    parser.add_argument("--blur-sigma", type=float, default=config.BLUR_SIGMA, help="Final blur sigma; 0 disables blur")
    parser.add_argument("--format", default=config.OUTPUT_FORMAT, help="Output image format (default: JPEG)")
    parser.add_argument("--threads", type=int, default=4, help="Number of files processed concurrently")
    parser.add_argument("--workers", type=int, default=1, help="Row bands computed concurrently per image")
    return parser.parse_args(argv)


def build_runtime_config(args: argparse.Namespace) -> Dict[str, object]:
    generation = config.GenerationConfig.from_mapping(vars(args))
    overrides: Dict[str, object] = {
        "PATH_INPUT": args.input.resolve(),
        "PATH_OUTPUT": args.output.resolve(),
        "THREADS": args.threads,
        "BLUR_RADIUS": args.blur_radius,
        "BLUR_SIGMA": args.blur_sigma,
        "OUTPUT_FORMAT": args.format.upper(),
        "GENERATION": generation,
    }
    return config.build_config(overrides)


def output_name(source: Path, cfg: Dict[str, object]) -> str:
    fmt = str(cfg["OUTPUT_FORMAT"]).upper()
    extension = _EXTENSIONS.get(fmt, f".{fmt.lower()}")
    return f"{source.stem}{cfg['OUTPUT_SUFFIX']}{extension}"


def process_file(source: Path, cfg: Dict[str, object], manager: SafeFileManager) -> Optional[Path]:
    """Generate and write the normal map of *source*; ``None`` on failure."""

    generation = cfg["GENERATION"]
    if not isinstance(generation, config.GenerationConfig):
        raise TypeError(f"GENERATION must be a GenerationConfig, got {type(generation).__name__}")
    try:
        normal_map = generate(load_image(source.read_bytes()), generation)
        report = validate_normal_map(normal_map, check_length=not generation.keep_large_detail)
        if report.has_critical_issues():
            LOGGER.warning("Validation issues for %s: %s", source.name, report.issues)
        data = finalize(
            normal_map,
            blur_radius=float(cfg["BLUR_RADIUS"]),  # type: ignore[arg-type]
            blur_sigma=float(cfg["BLUR_SIGMA"]),  # type: ignore[arg-type]
            output_format=str(cfg["OUTPUT_FORMAT"]),
        )
    except NormalMapError as exc:
        LOGGER.error("Failed to generate normal map for %s: %s", source, exc)
        return None
    destination = manager.atomic_save_bytes(data, output_name(source, cfg))
    LOGGER.info("Wrote %s", destination)
    return destination


def run(cfg: Dict[str, object]) -> int:
    """Process every texture described by *cfg*; return a process exit code."""

    sources: List[Path] = list_images(Path(cfg["PATH_INPUT"]))  # type: ignore[arg-type]
    if not sources:
        LOGGER.error("No input textures found at %s", cfg["PATH_INPUT"])
        return 1
    manager = SafeFileManager(Path(cfg["PATH_OUTPUT"]))  # type: ignore[arg-type]
    results = run_parallel(
        lambda source: process_file(source, cfg, manager),
        sources,
        max_workers=int(cfg["THREADS"]),  # type: ignore[arg-type]
    )
    failed = sum(1 for result in results if result is None)
    LOGGER.info("Generated %d of %d normal maps", len(results) - failed, len(results))
    return 1 if failed else 0


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    try:
        cfg = build_runtime_config(args)
    except NormalMapError as exc:
        raise SystemExit(f"Invalid options: {exc}") from exc
    _configure_logging(Path(cfg["LOG_FILE"]))  # type: ignore[arg-type]
    LOGGER.info(
        "CLI flags resolved -> kernel=%s, strength=%s, invert=%s, keep_large_detail=%s",
        args.kernel,
        args.strength,
        args.invert,
        args.keep_large_detail,
    )
    sys.exit(run(cfg))


if __name__ == "__main__":
    main()
