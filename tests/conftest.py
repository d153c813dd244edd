"""Shared fixtures: in-memory images built with numpy and Pillow."""

import io

import numpy as np
import pytest
from PIL import Image

from thumbgallery.codec import SourceFile


def make_image_bytes(width, height, fmt="JPEG", mode="RGB"):
    """Return encoded bytes of a gradient image of the given size."""
    xs = np.linspace(0, 255, width, dtype=np.float32)
    ys = np.linspace(0, 255, height, dtype=np.float32)
    red = np.tile(xs, (height, 1))
    green = np.tile(ys.reshape(-1, 1), (1, width))
    blue = np.full((height, width), 96, dtype=np.float32)
    bands = [red, green, blue]
    if mode == "RGBA":
        alpha = np.where(red > 127, 255, 0).astype(np.float32)
        bands.append(alpha)
    arr = np.stack(bands, axis=-1).astype(np.uint8)
    img = Image.fromarray(arr)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def make_source(width, height, name=None, fmt="JPEG", mode="RGB"):
    mime = {"JPEG": "image/jpeg", "PNG": "image/png"}[fmt]
    ext = {"JPEG": "jpg", "PNG": "png"}[fmt]
    return SourceFile(
        name=name or f"{width}x{height}.{ext}",
        data=make_image_bytes(width, height, fmt=fmt, mode=mode),
        mime_type=mime,
    )


@pytest.fixture
def landscape():
    return make_source(1000, 500)


@pytest.fixture
def portrait():
    return make_source(500, 1000)


@pytest.fixture
def square():
    return make_source(500, 500)


@pytest.fixture
def corrupt():
    return SourceFile(name="broken.jpg", data=b"definitely not an image", mime_type="image/jpeg")
