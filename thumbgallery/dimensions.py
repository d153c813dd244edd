"""
Aspect-preserving target dimensions for thumbnails.

The longer ("governing") edge is clamped to the maximum edge length and the
shorter edge is scaled by the same ratio.  Width governs when the image is
square, so ``plan(300, 300, 400)`` leaves the image at its source size
rather than upscaling it.
"""

from __future__ import annotations

import math
from typing import Tuple


def _round_half_up(value: float) -> int:
    # Matches the browser's Math.round for positive values (0.5 rounds up)
    return int(math.floor(value + 0.5))


def plan(source_width: int, source_height: int, max_edge: int) -> Tuple[int, int]:
    """Return ``(target_width, target_height)`` for a thumbnail.

    Parameters
    ----------
    source_width, source_height: int
        Dimensions of the decoded source image.  Must be positive.
    max_edge: int
        Maximum length of the governing edge.  Must be positive.

    Returns
    -------
    tuple of int
        Target dimensions, each at least 1.  The governing edge is
        ``min(max_edge, edge)``; the other edge is rounded to the nearest
        integer.
    """
    for name, value in (("source_width", source_width),
                        ("source_height", source_height),
                        ("max_edge", max_edge)):
        if value < 1:
            raise ValueError(f"{name} must be a positive integer, got {value!r}")

    if source_width >= source_height:
        target_width = min(max_edge, source_width)
        ratio = target_width / source_width
        target_height = max(1, _round_half_up(source_height * ratio))
    else:
        target_height = min(max_edge, source_height)
        ratio = target_height / source_height
        target_width = max(1, _round_half_up(source_width * ratio))
    return target_width, target_height
