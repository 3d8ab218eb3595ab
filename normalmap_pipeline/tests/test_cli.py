"""Tests for the batch command line interface."""
from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from normalmap_pipeline import main_normalmap
from normalmap_pipeline.core.config import GenerationConfig, KernelType


def _write_texture(path, seed: int) -> None:
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(12, 12, 3), dtype=np.uint8)
    Image.fromarray(pixels, mode="RGB").save(path)


def test_parse_args_bool_flags(tmp_path) -> None:
    args = main_normalmap.parse_args(
        ["--input", str(tmp_path), "--kernel", "prewitt", "--invert", "--keep-large-detail", "no"]
    )
    assert args.invert is True
    assert args.keep_large_detail is False
    cfg = main_normalmap.build_runtime_config(args)
    generation = cfg["GENERATION"]
    assert isinstance(generation, GenerationConfig)
    assert generation.kernel is KernelType.PREWITT
    assert generation.invert is True


def test_run_writes_normal_maps(tmp_path) -> None:
    source_dir = tmp_path / "textures"
    source_dir.mkdir()
    _write_texture(source_dir / "bricks.png", 1)
    _write_texture(source_dir / "stone.png", 2)
    output_dir = tmp_path / "out"

    args = main_normalmap.parse_args(
        ["--input", str(source_dir), "--output", str(output_dir), "--format", "png", "--keep-large-detail", "--large-detail-scale", "0.5"]
    )
    status = main_normalmap.run(main_normalmap.build_runtime_config(args))

    assert status == 0
    written = sorted(path.name for path in output_dir.glob("*.png"))
    assert written == ["bricks_normal.png", "stone_normal.png"]
    with Image.open(output_dir / "bricks_normal.png") as result:
        assert result.size == (12, 12)


def test_run_reports_failures(tmp_path) -> None:
    source_dir = tmp_path / "textures"
    source_dir.mkdir()
    _write_texture(source_dir / "good.png", 3)
    (source_dir / "broken.png").write_bytes(b"not a png")

    args = main_normalmap.parse_args(["--input", str(source_dir), "--output", str(tmp_path / "out")])
    status = main_normalmap.run(main_normalmap.build_runtime_config(args))

    assert status == 1
    assert (tmp_path / "out" / "good_normal.jpg").exists()
    assert not (tmp_path / "out" / "broken_normal.jpg").exists()


def test_run_without_inputs_fails(tmp_path) -> None:
    args = main_normalmap.parse_args(["--input", str(tmp_path / "missing"), "--output", str(tmp_path / "out")])
    assert main_normalmap.run(main_normalmap.build_runtime_config(args)) == 1


def test_invalid_strength_exits(tmp_path) -> None:
    with pytest.raises(SystemExit):
        main_normalmap.main(["--input", str(tmp_path), "--strength", "0"])


def test_build_runtime_config_forwards_generation_options(tmp_path) -> None:
    args = main_normalmap.parse_args(
        ["--input", str(tmp_path), "--strength", "3.5", "--large-detail-scale", "0.5", "--workers", "2"]
    )
    generation = main_normalmap.build_runtime_config(args)["GENERATION"]
    assert generation == GenerationConfig(strength=3.5, large_detail_scale=0.5, workers=2)


def test_process_file_rejects_untyped_generation_options(tmp_path) -> None:
    source = tmp_path / "tile.png"
    _write_texture(source, 4)
    args = main_normalmap.parse_args(["--input", str(source), "--output", str(tmp_path / "out")])
    cfg = main_normalmap.build_runtime_config(args)
    cfg["GENERATION"] = {"kernel": "sobel"}
    manager = main_normalmap.SafeFileManager(tmp_path / "out")
    with pytest.raises(TypeError):
        main_normalmap.process_file(source, cfg, manager)


def test_oversized_texture_is_reported_not_raised(tmp_path, monkeypatch) -> None:
    source_dir = tmp_path / "textures"
    source_dir.mkdir()
    _write_texture(source_dir / "huge.png", 5)
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 50)
    args = main_normalmap.parse_args(["--input", str(source_dir), "--output", str(tmp_path / "out")])
    assert main_normalmap.run(main_normalmap.build_runtime_config(args)) == 1
