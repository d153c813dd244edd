"""
High quality image resizing.

The thumbnail pipeline treats resizing as an external capability with a
narrow contract: ``resize(source, target_width, target_height, options)``
returns a new surface of exactly the requested size or raises
:class:`~thumbgallery.errors.ResampleError`.  :class:`Resampler` describes
that contract and :class:`PillowResampler` is the default implementation.

Quality levels follow the usual 0–3 scale (box, bilinear, bicubic,
Lanczos).  High quality downsampling filters soften edges, so an unsharp
mask is applied afterwards.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from dataclasses import dataclass
from typing import Optional

from PIL import Image, ImageFilter

from .errors import ResampleError

logger = logging.getLogger(__name__)

_FILTERS = {
    0: Image.Resampling.BOX,
    1: Image.Resampling.BILINEAR,
    2: Image.Resampling.BICUBIC,
    3: Image.Resampling.LANCZOS,
}


@dataclass(frozen=True)
class ResampleOptions:
    """Quality settings passed with every resize call.

    Attributes
    ----------
    quality: int
        0 (fastest) to 3 (highest quality).
    alpha: bool
        Preserve the alpha channel.  When ``False`` transparency is dropped.
    unsharp_amount: float
        Strength of the unsharp mask in percent; 0 disables sharpening.
    unsharp_radius: float
        Blur radius of the unsharp mask.
    unsharp_threshold: int
        Minimum brightness change that will be sharpened.
    """
    quality: int = 3
    alpha: bool = True
    unsharp_amount: float = 80
    unsharp_radius: float = 0.6
    unsharp_threshold: int = 2


HIGH_QUALITY = ResampleOptions()


class Resampler:
    """Interface of a resize backend."""

    async def resize(self, source: Image.Image, target_width: int, target_height: int,
                     options: ResampleOptions = HIGH_QUALITY) -> Image.Image:
        """Return a new image of exactly ``target_width`` x ``target_height``.

        Implementations must raise :class:`ResampleError` on failure.
        """
        raise NotImplementedError


class PillowResampler(Resampler):
    """Resampler backed by :meth:`PIL.Image.Image.resize`.

    Parameters
    ----------
    executor: concurrent.futures.Executor, optional
        Executor running the blocking Pillow calls.  ``None`` uses the event
        loop's default thread pool.
    """

    def __init__(self, executor: Optional[concurrent.futures.Executor] = None) -> None:
        self._executor = executor

    async def resize(self, source: Image.Image, target_width: int, target_height: int,
                     options: ResampleOptions = HIGH_QUALITY) -> Image.Image:
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(
            self._executor, _resize_sync, source, target_width, target_height, options
        )
        if result.size != (target_width, target_height):
            raise ResampleError(
                f"expected {target_width}x{target_height}, got {result.width}x{result.height}"
            )
        return result


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in ("RGBA", "LA", "PA") or (
        image.mode == "P" and "transparency" in image.info
    )


def _sharpen(image: Image.Image, options: ResampleOptions) -> Image.Image:
    if options.unsharp_amount <= 0:
        return image
    mask = ImageFilter.UnsharpMask(
        radius=options.unsharp_radius,
        percent=int(options.unsharp_amount),
        threshold=int(options.unsharp_threshold),
    )
    if image.mode == "RGBA":
        # Sharpen colour only; the alpha channel keeps its resampled edges
        sharpened = image.convert("RGB").filter(mask)
        sharpened.putalpha(image.getchannel("A"))
        return sharpened
    return image.filter(mask)


def _resize_sync(source: Image.Image, target_width: int, target_height: int,
                 options: ResampleOptions) -> Image.Image:
    if target_width < 1 or target_height < 1:
        raise ResampleError(f"invalid target size {target_width}x{target_height}")
    resample = _FILTERS.get(options.quality)
    if resample is None:
        raise ResampleError(f"quality must be between 0 and 3, got {options.quality!r}")
    logger.debug("Resampling %dx%d %s to %dx%d (quality %d)", source.width, source.height,
                 source.mode, target_width, target_height, options.quality)
    try:
        if options.alpha and _has_alpha(source):
            # Premultiplied alpha avoids dark fringes around transparent areas
            working = source.convert("RGBA").convert("RGBa")
            resized = working.resize((target_width, target_height), resample=resample)
            resized = resized.convert("RGBA")
        else:
            working = source if source.mode == "RGB" else source.convert("RGB")
            resized = working.resize((target_width, target_height), resample=resample)
        return _sharpen(resized, options)
    except (OSError, ValueError, MemoryError) as exc:
        raise ResampleError(str(exc) or type(exc).__name__) from exc
