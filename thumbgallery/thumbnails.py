"""
Thumbnail generation for a single selected file.

:func:`process` runs the per-file workflow decode → plan → resample →
encode, measures how long it took and returns an immutable
:class:`ProcessedImage`.  Any stage failure propagates as a
:class:`~thumbgallery.errors.PipelineError` subclass and no record is
produced; the caller decides what to do with the failure.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image

from .codec import SourceFile, decode, encode, to_data_url
from .config import ThumbnailSpec
from .dimensions import plan
from .errors import PipelineError, ResampleError
from .resampler import HIGH_QUALITY, PillowResampler, Resampler

logger = logging.getLogger(__name__)

THUMBNAIL_MIME_TYPE = "image/jpeg"
THUMBNAIL_QUALITY = 0.9


@dataclass(frozen=True)
class ProcessedImage:
    """Result of a successful pipeline run.

    Attributes
    ----------
    id: str
        Identifier unique across the session.
    name: str
        Name of the source file.
    original_size: int
        Byte length of the source file.
    original_data_url: str
        Displayable representation of the untouched original.
    thumbnail_data: bytes
        Encoded thumbnail (JPEG).
    thumbnail_data_url: str
        Displayable representation of the thumbnail.
    thumbnail_dimensions: tuple of int
        ``(width, height)`` of the thumbnail.
    processing_time_ms: float
        Wall time spent in the pipeline, from a monotonic clock.
    thumbnail_size: int
        Byte length of ``thumbnail_data``.
    """
    id: str
    name: str
    original_size: int
    original_data_url: str
    thumbnail_data: bytes
    thumbnail_data_url: str
    thumbnail_dimensions: Tuple[int, int]
    processing_time_ms: float
    thumbnail_size: int


class IdFactory:
    """Mint session-unique image ids.

    Ids combine a random UUID with a monotonically increasing counter, so
    two images finishing in the same millisecond still get distinct ids.
    """

    def __init__(self, prefix: str = "img") -> None:
        self._prefix = prefix
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            seq = next(self._counter)
        return f"{self._prefix}-{uuid.uuid4().hex}-{seq}"


_default_ids = IdFactory()
_default_resampler = PillowResampler()


async def process(source: SourceFile, spec: ThumbnailSpec, *,
                  resampler: Optional[Resampler] = None,
                  ids: Optional[IdFactory] = None) -> ProcessedImage:
    """Generate a thumbnail for ``source``.

    Parameters
    ----------
    source: SourceFile
        The selected file.  It is only read.
    spec: ThumbnailSpec
        Maximum edge length for this run.
    resampler: Resampler, optional
        Resize backend; defaults to a shared :class:`PillowResampler`.
    ids: IdFactory, optional
        Id generator; defaults to a module-wide factory.

    Raises
    ------
    DecodeError, ResampleError, EncodeError
        When the corresponding stage fails.
    """
    resampler = resampler or _default_resampler
    ids = ids or _default_ids
    started = time.perf_counter()

    surface = await decode(source)
    target: Optional[Image.Image] = None
    try:
        width, height = plan(surface.width, surface.height, spec.max_edge)
        try:
            target = await resampler.resize(surface, width, height, HIGH_QUALITY)
        except PipelineError:
            raise
        except Exception as exc:
            raise ResampleError(str(exc) or type(exc).__name__, filename=source.name) from exc
        if target.size != (width, height):
            raise ResampleError(
                f"expected {width}x{height}, got {target.width}x{target.height}",
                filename=source.name,
            )
        thumbnail_data, thumbnail_size = await encode(target, THUMBNAIL_MIME_TYPE, THUMBNAIL_QUALITY)
    except PipelineError as exc:
        if exc.filename is None:
            exc.filename = source.name
        raise
    finally:
        surface.close()
        if target is not None:
            target.close()

    try:
        original_data_url = await to_data_url(source.data, source.mime_type)
        thumbnail_data_url = await to_data_url(thumbnail_data, THUMBNAIL_MIME_TYPE)
    except PipelineError as exc:
        if exc.filename is None:
            exc.filename = source.name
        raise

    elapsed_ms = max(0.0, (time.perf_counter() - started) * 1000.0)
    image = ProcessedImage(
        id=ids(),
        name=source.name,
        original_size=source.byte_size,
        original_data_url=original_data_url,
        thumbnail_data=thumbnail_data,
        thumbnail_data_url=thumbnail_data_url,
        thumbnail_dimensions=(width, height),
        processing_time_ms=elapsed_ms,
        thumbnail_size=thumbnail_size,
    )
    logger.debug("Thumbnailed %s to %dx%d in %.2f ms (%d -> %d bytes)",
                 source.name, width, height, elapsed_ms, source.byte_size, thumbnail_size)
    return image
