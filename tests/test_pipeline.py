from __future__ import annotations

import io
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from PIL import Image

from image_server.services.images.codec import PillowCodec, scaled_size, target_box
from image_server.services.images.errors import ImageErrorKind, ImageToolError
from image_server.services.images.file_store import FileStore
from image_server.services.images.pipeline import TransformPipeline


def _open(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


def test_convert_to_png(images_dir: Path, pipeline: TransformPipeline) -> None:
    result = pipeline.convert(images_dir / "test.jpg", "png")
    assert result.mime_type == "image/png"
    assert _open(result.data).format == "PNG"


@pytest.mark.parametrize(
    "target,fmt,mime",
    [
        ("jpg", "JPEG", "image/jpeg"),
        ("jpeg", "JPEG", "image/jpeg"),
        ("webp", "WEBP", "image/webp"),
        ("gif", "GIF", "image/gif"),
    ],
)
def test_convert_transparent_png(
    images_dir: Path, pipeline: TransformPipeline, target: str, fmt: str, mime: str
) -> None:
    result = pipeline.convert(images_dir / "wide.png", target, quality=70)
    assert result.mime_type == mime
    out = _open(result.data)
    assert out.format == fmt
    assert out.size == (400, 100)


def test_convert_to_gif_keeps_transparency(tmp_path: Path, pipeline: TransformPipeline) -> None:
    src = Image.new("RGBA", (20, 10), (0, 0, 0, 0))
    src.paste((255, 0, 0, 255), (10, 0, 20, 10))
    src.save(tmp_path / "half.png")

    out = _open(pipeline.convert(tmp_path / "half.png", "gif").data)
    assert out.format == "GIF"
    assert "transparency" in out.info
    rgba = out.convert("RGBA")
    assert rgba.getpixel((2, 5))[3] == 0
    assert rgba.getpixel((15, 5)) == (255, 0, 0, 255)


def test_convert_quality_only_changes_lossy_output(images_dir: Path, pipeline: TransformPipeline) -> None:
    noisy = images_dir / "noise.png"
    Image.effect_noise((128, 128), 64).convert("RGB").save(noisy)

    low = pipeline.convert(noisy, "jpg", quality=5)
    high = pipeline.convert(noisy, "jpg", quality=100)
    assert len(low.data) < len(high.data)

    png_low = pipeline.convert(noisy, "png", quality=5)
    png_high = pipeline.convert(noisy, "png", quality=100)
    assert png_low.data == png_high.data


def test_convert_rejects_unknown_target(images_dir: Path, pipeline: TransformPipeline) -> None:
    with pytest.raises(ImageToolError) as exc:
        pipeline.convert(images_dir / "test.jpg", "tiff")
    assert exc.value.kind is ImageErrorKind.INVALID_ARGUMENT


@pytest.mark.parametrize("name", ["test.jpg", "wide.png", "small.gif", "tiny.bmp", "photo.webp"])
def test_resize_inside_never_exceeds_width(images_dir: Path, pipeline: TransformPipeline, name: str) -> None:
    result = pipeline.resize(images_dir / name, width=50, fit="inside")
    assert _open(result.data).width <= 50


def test_resize_keeps_source_container(images_dir: Path, pipeline: TransformPipeline) -> None:
    result = pipeline.resize(images_dir / "wide.png", width=100)
    out = _open(result.data)
    assert result.mime_type == "image/png"
    assert out.format == "PNG"
    assert out.size == (100, 25)


def test_resize_height_only_preserves_aspect(images_dir: Path, pipeline: TransformPipeline) -> None:
    result = pipeline.resize(images_dir / "test.jpg", height=40)
    assert _open(result.data).size == (60, 40)
    assert result.mime_type == "image/jpeg"


@pytest.mark.parametrize("fit", ["fill", "cover", "contain"])
def test_resize_box_filling_modes_hit_exact_box(images_dir: Path, pipeline: TransformPipeline, fit: str) -> None:
    result = pipeline.resize(images_dir / "test.jpg", width=100, height=100, fit=fit)
    assert _open(result.data).size == (100, 100)


def test_resize_inside_and_outside(images_dir: Path, pipeline: TransformPipeline) -> None:
    inside = _open(pipeline.resize(images_dir / "test.jpg", width=60, height=60, fit="inside").data)
    assert inside.size == (60, 40)

    outside = _open(pipeline.resize(images_dir / "test.jpg", width=60, height=60, fit="outside").data)
    assert outside.size == (90, 60)


def test_resize_contain_pads_transparent_source(images_dir: Path, pipeline: TransformPipeline) -> None:
    out = _open(pipeline.resize(images_dir / "wide.png", width=100, height=100, fit="contain").data)
    assert out.size == (100, 100)
    assert out.mode == "RGBA"
    assert out.getpixel((50, 0))[3] == 0


def test_resize_requires_a_dimension(images_dir: Path, pipeline: TransformPipeline) -> None:
    with pytest.raises(ImageToolError) as exc:
        pipeline.resize(images_dir / "test.jpg")
    assert exc.value.kind is ImageErrorKind.MISSING_DIMENSION


def test_resize_rejects_unknown_fit(images_dir: Path, pipeline: TransformPipeline) -> None:
    with pytest.raises(ImageToolError) as exc:
        pipeline.resize(images_dir / "test.jpg", width=10, fit="stretch")
    assert exc.value.kind is ImageErrorKind.INVALID_ARGUMENT


def test_thumbnail_does_not_upscale(images_dir: Path, pipeline: TransformPipeline) -> None:
    result = pipeline.thumbnail(images_dir / "test.jpg", max_dimension=200)
    assert _open(result.data).size == (120, 80)
    assert result.mime_type == "image/jpeg"


def test_thumbnail_bounds_large_image(images_dir: Path, pipeline: TransformPipeline) -> None:
    result = pipeline.thumbnail(images_dir / "wide.png")
    out = _open(result.data)
    assert out.size == (200, 50)
    assert out.format == "PNG"


def test_thumbnail_square_source(images_dir: Path, pipeline: TransformPipeline) -> None:
    result = pipeline.thumbnail(images_dir / "photo.webp", max_dimension=64)
    assert _open(result.data).size == (64, 64)
    assert result.mime_type == "image/webp"


def test_inspect_technical_jpeg(images_dir: Path, pipeline: TransformPipeline) -> None:
    info = pipeline.inspect_technical(images_dir / "test.jpg")
    assert info.format == "jpeg"
    assert (info.width, info.height) == (120, 80)
    assert info.channels == 3
    assert info.color_space == "srgb"
    assert info.bit_depth == 8
    assert not info.has_alpha
    assert info.density == pytest.approx(300)


def test_inspect_technical_alpha_png(images_dir: Path, pipeline: TransformPipeline) -> None:
    info = pipeline.inspect_technical(images_dir / "wide.png")
    assert info.has_alpha
    assert info.channels == 4
    assert not info.has_exif
    assert not info.has_icc_profile


def test_inspect_basic_never_uses_codec(images_dir: Path) -> None:
    codec = MagicMock()
    pipeline = TransformPipeline(codec)
    meta = pipeline.inspect_basic(FileStore(images_dir).resolve("wide.png"))

    assert meta.filename == "wide.png"
    assert meta.format == "PNG"
    assert meta.mime_type == "image/png"
    assert meta.size_bytes > 0
    assert codec.method_calls == []


def test_codec_errors_become_codec_failure(images_dir: Path, pipeline: TransformPipeline) -> None:
    (images_dir / "broken.png").write_bytes(b"definitely not a png")
    with pytest.raises(ImageToolError) as exc:
        pipeline.convert(images_dir / "broken.png", "jpg")
    assert exc.value.kind is ImageErrorKind.CODEC_FAILURE
    assert "decode failed" in exc.value.detail


def test_injected_codec_failure_is_wrapped(images_dir: Path) -> None:
    codec = MagicMock()
    codec.decode.side_effect = RuntimeError("out of memory")
    pipeline = TransformPipeline(codec)

    with pytest.raises(ImageToolError) as exc:
        pipeline.thumbnail(images_dir / "test.jpg")
    assert exc.value.kind is ImageErrorKind.CODEC_FAILURE
    assert "out of memory" in exc.value.detail
    assert codec.decode.call_count == 1


def test_size_helpers() -> None:
    assert target_box((120, 80), 60, None) == (60, 40)
    assert target_box((120, 80), None, 20) == (30, 20)
    assert scaled_size((1000, 10), (50, 50), grow=False) == (50, 1)
    assert scaled_size((120, 80), (60, 60), grow=True) == (90, 60)


def test_decode_takes_first_gif_frame(tmp_path: Path) -> None:
    frames = [Image.new("P", (10, 10), i) for i in range(3)]
    path = tmp_path / "anim.gif"
    frames[0].save(path, save_all=True, append_images=frames[1:])

    decoded = PillowCodec().decode(path)
    assert decoded.size == (10, 10)
