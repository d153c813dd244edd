"""In-memory collection of processed images for one session."""

from __future__ import annotations

import logging
from typing import Iterator, List, Set, Tuple

from .thumbnails import ProcessedImage

logger = logging.getLogger(__name__)


class GalleryState:
    """Completion-ordered list of :class:`ProcessedImage` records.

    ``append`` and ``clear`` are the only mutators.  Ids must be unique
    while an image is in the gallery.
    """

    def __init__(self) -> None:
        self._images: List[ProcessedImage] = []
        self._ids: Set[str] = set()

    def append(self, image: ProcessedImage) -> None:
        if image.id in self._ids:
            raise ValueError(f"duplicate image id {image.id!r}")
        self._images.append(image)
        self._ids.add(image.id)

    def clear(self) -> None:
        removed = len(self._images)
        self._images.clear()
        self._ids.clear()
        logger.info("Cleared %d image(s) from the gallery", removed)

    def count(self) -> int:
        return len(self._images)

    def images(self) -> Tuple[ProcessedImage, ...]:
        """Snapshot of the current images, oldest first."""
        return tuple(self._images)

    def __len__(self) -> int:
        return len(self._images)

    def __iter__(self) -> Iterator[ProcessedImage]:
        return iter(self.images())
