"""
Image decode/encode behind a uniform async interface.

Pillow does the actual work; every blocking call is pushed to the event
loop's default thread executor so decoding one large file never stalls the
other files of a batch.  The byte buffer handed to Pillow while decoding is
the transient handle of a run: it is acquired through
:func:`source_handle` and released exactly once whether decoding succeeds
or not.
"""

from __future__ import annotations

import asyncio
import base64
import io
import logging
import mimetypes
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Tuple

from PIL import Image, ImageOps

from .errors import DecodeError, EncodeError

logger = logging.getLogger(__name__)

# Browser canvas defaults when the requested quality is out of range
DEFAULT_ENCODE_QUALITY = 0.92

_OUTPUT_FORMATS = {
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/png": "PNG",
    "image/webp": "WEBP",
}


@dataclass(frozen=True)
class SourceFile:
    """An immutable selected file: name, raw bytes and MIME type."""
    name: str
    data: bytes
    mime_type: str = "application/octet-stream"

    @property
    def byte_size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: str | Path) -> "SourceFile":
        """Read ``path`` fully into memory, guessing the MIME type from its suffix."""
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            data=path.read_bytes(),
            mime_type=mime_type or "application/octet-stream",
        )


@contextmanager
def source_handle(source: SourceFile) -> Iterator[io.BytesIO]:
    """Yield a readable buffer over ``source`` and close it on exit."""
    handle = io.BytesIO(source.data)
    try:
        yield handle
    finally:
        handle.close()


def _decode_sync(source: SourceFile) -> Image.Image:
    with source_handle(source) as handle:
        try:
            with Image.open(handle) as img:
                img.load()
                # Apply EXIF orientation so dimensions match what a browser shows
                return ImageOps.exif_transpose(img)
        except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
            logger.debug("Pillow could not decode %s (%d bytes): %r", source.name, source.byte_size, exc)
            raise DecodeError(str(exc) or type(exc).__name__, filename=source.name) from exc


async def decode(source: SourceFile) -> Image.Image:
    """Decode ``source`` into a Pillow image.

    Raises
    ------
    DecodeError
        If the bytes are not a readable or supported image.
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, _decode_sync, source)


def _pillow_quality(quality: float) -> int:
    if not 0.0 <= quality <= 1.0:
        quality = DEFAULT_ENCODE_QUALITY
    # Pillow discourages JPEG quality above 95
    return max(1, min(95, int(round(quality * 100))))


def _flatten(surface: Image.Image) -> Image.Image:
    """Return an RGB/L copy of ``surface`` suitable for JPEG, alpha composited on white."""
    has_alpha = surface.mode in ("RGBA", "LA", "PA") or (
        surface.mode == "P" and "transparency" in surface.info
    )
    if has_alpha:
        rgba = surface.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    if surface.mode not in ("RGB", "L"):
        return surface.convert("RGB")
    return surface


def _encode_sync(surface: Image.Image, mime_type: str, quality: float) -> Tuple[bytes, int]:
    fmt = _OUTPUT_FORMATS.get(mime_type.lower())
    if fmt is None:
        raise EncodeError(f"unsupported output type {mime_type!r}")
    if surface.width == 0 or surface.height == 0:
        raise EncodeError(f"cannot encode a {surface.width}x{surface.height} surface")
    image = _flatten(surface) if fmt == "JPEG" else surface
    buffer = io.BytesIO()
    try:
        image.save(buffer, format=fmt, quality=_pillow_quality(quality))
    except (OSError, ValueError, KeyError) as exc:
        raise EncodeError(str(exc) or type(exc).__name__) from exc
    data = buffer.getvalue()
    if not data:
        raise EncodeError("encoder produced no output")
    return data, len(data)


async def encode(surface: Image.Image, mime_type: str, quality: float) -> Tuple[bytes, int]:
    """Compress ``surface`` and return ``(encoded_bytes, byte_size)``.

    ``quality`` uses the browser's 0–1 scale; values outside that range fall
    back to :data:`DEFAULT_ENCODE_QUALITY`.

    Raises
    ------
    EncodeError
        For empty surfaces, unsupported MIME types or encoder failures.
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, _encode_sync, surface, mime_type, quality)


def _data_url_sync(data: bytes, mime_type: str) -> str:
    try:
        payload = base64.b64encode(data).decode("ascii")
    except TypeError as exc:
        raise EncodeError(f"cannot represent {type(data).__name__} as a data URL") from exc
    return f"data:{mime_type};base64,{payload}"


async def to_data_url(data: bytes, mime_type: str) -> str:
    """Return a ``data:`` URL for ``data`` that a browser can display directly."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, _data_url_sync, data, mime_type)
