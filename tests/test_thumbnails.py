import asyncio
import io

import imagehash
import pytest
from PIL import Image

from thumbgallery.config import ThumbnailSpec
from thumbgallery.errors import DecodeError, EncodeError, ResampleError
from thumbgallery.resampler import HIGH_QUALITY, Resampler
from thumbgallery.thumbnails import IdFactory, process

from conftest import make_source


class RecordingResampler(Resampler):
    """Delegates to Pillow's plain resize and records every call."""

    def __init__(self):
        self.calls = []

    async def resize(self, source, target_width, target_height, options=HIGH_QUALITY):
        self.calls.append((source.size, target_width, target_height, options))
        return source.resize((target_width, target_height))


class FailingResampler(Resampler):
    async def resize(self, source, target_width, target_height, options=HIGH_QUALITY):
        raise RuntimeError("accelerator lost")


class WrongSizeResampler(Resampler):
    async def resize(self, source, target_width, target_height, options=HIGH_QUALITY):
        return source.resize((target_width + 1, target_height))


def test_process_landscape(landscape):
    image = asyncio.run(process(landscape, ThumbnailSpec(400)))
    assert image.thumbnail_dimensions == (400, 200)
    assert image.name == landscape.name
    assert image.original_size == landscape.byte_size
    assert image.thumbnail_size == len(image.thumbnail_data)
    assert image.processing_time_ms >= 0.0
    assert image.original_data_url.startswith("data:image/jpeg;base64,")
    assert image.thumbnail_data_url.startswith("data:image/jpeg;base64,")
    with Image.open(io.BytesIO(image.thumbnail_data)) as thumb:
        assert thumb.format == "JPEG"
        assert thumb.size == (400, 200)


def test_process_portrait_and_square(portrait, square):
    assert asyncio.run(process(portrait, ThumbnailSpec(400))).thumbnail_dimensions == (200, 400)
    assert asyncio.run(process(square, ThumbnailSpec(400))).thumbnail_dimensions == (400, 400)


def test_small_image_keeps_its_size():
    image = asyncio.run(process(make_source(120, 90), ThumbnailSpec(400)))
    assert image.thumbnail_dimensions == (120, 90)


def test_png_with_alpha_becomes_jpeg():
    source = make_source(600, 300, fmt="PNG", mode="RGBA")
    image = asyncio.run(process(source, ThumbnailSpec(200)))
    assert image.thumbnail_dimensions == (200, 100)
    assert image.original_data_url.startswith("data:image/png;base64,")
    with Image.open(io.BytesIO(image.thumbnail_data)) as thumb:
        assert thumb.mode == "RGB"


def test_fixed_quality_options_passed_every_call(landscape, portrait):
    resampler = RecordingResampler()
    for source in (landscape, portrait):
        asyncio.run(process(source, ThumbnailSpec(400), resampler=resampler))
    assert [call[1:3] for call in resampler.calls] == [(400, 200), (200, 400)]
    assert all(call[3] == HIGH_QUALITY for call in resampler.calls)


def test_repeat_runs_are_stable(landscape):
    first = asyncio.run(process(landscape, ThumbnailSpec(400)))
    second = asyncio.run(process(landscape, ThumbnailSpec(400)))
    assert first.thumbnail_dimensions == second.thumbnail_dimensions
    assert first.id != second.id
    with Image.open(io.BytesIO(first.thumbnail_data)) as a, Image.open(io.BytesIO(second.thumbnail_data)) as b:
        assert imagehash.phash(a) - imagehash.phash(b) <= 2


def test_decode_failure_propagates(corrupt):
    with pytest.raises(DecodeError):
        asyncio.run(process(corrupt, ThumbnailSpec(400)))


def test_resampler_exception_becomes_resample_error(landscape):
    with pytest.raises(ResampleError) as excinfo:
        asyncio.run(process(landscape, ThumbnailSpec(400), resampler=FailingResampler()))
    assert excinfo.value.filename == landscape.name
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_wrong_output_size_is_rejected(landscape):
    with pytest.raises(ResampleError):
        asyncio.run(process(landscape, ThumbnailSpec(400), resampler=WrongSizeResampler()))


def test_encode_failure_propagates(landscape, monkeypatch):
    from thumbgallery import thumbnails

    async def broken_encode(surface, mime_type, quality):
        raise EncodeError("encoder unavailable")

    monkeypatch.setattr(thumbnails, "encode", broken_encode)
    with pytest.raises(EncodeError) as excinfo:
        asyncio.run(process(landscape, ThumbnailSpec(400)))
    assert excinfo.value.filename == landscape.name


def test_id_factory_unique_and_ordered():
    ids = IdFactory()
    minted = [ids() for _ in range(1000)]
    assert len(set(minted)) == 1000
    assert [int(i.rsplit("-", 1)[1]) for i in minted[:3]] == [1, 2, 3]
    assert all(i.startswith("img-") for i in minted)


def test_thumbnail_spec_validates():
    with pytest.raises(ValueError):
        ThumbnailSpec(0)
