"""
Batch orchestration of the thumbnail pipeline.

A :class:`BatchCoordinator` owns the session's :class:`GalleryState`.  When
a selection arrives every file is started immediately as its own asyncio
task; each task appends its result to the gallery the moment it finishes,
so the display can update while slower files are still in flight.  A
failure is logged and reported for that file only; siblings are never
cancelled.  The batch is done once every task has settled.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, Iterable, List, Optional

from .codec import SourceFile
from .config import ThumbnailSpec
from .errors import PipelineError
from .gallery import GalleryState
from .resampler import Resampler
from .thumbnails import IdFactory, ProcessedImage, process

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchOutcome:
    """Settled result of one file: either ``image`` or ``error`` is set."""
    source: SourceFile
    image: Optional[ProcessedImage] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchReport:
    """Per-file outcomes of a batch, in completion order."""
    succeeded: List[ProcessedImage] = field(default_factory=list)
    failed: List[BatchOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)

    def add(self, outcome: BatchOutcome) -> None:
        if outcome.ok:
            self.succeeded.append(outcome.image)
        else:
            self.failed.append(outcome)


class BatchCoordinator:
    """Run the thumbnail pipeline over selections and feed the gallery.

    Parameters
    ----------
    gallery: GalleryState
        Session gallery receiving successful results.
    spec: ThumbnailSpec
        Thumbnail configuration used for every file.
    resampler: Resampler, optional
        Resize backend passed through to :func:`process`.
    ids: IdFactory, optional
        Session id generator; a fresh one is created when omitted.
    on_image, on_error, on_done: callable, optional
        Listeners called with a :class:`ProcessedImage` as soon as it is
        appended, with ``(source, error)`` for each failure, and with the
        :class:`BatchReport` once the whole batch has settled.
    """

    def __init__(self, gallery: GalleryState, spec: ThumbnailSpec, *,
                 resampler: Optional[Resampler] = None,
                 ids: Optional[IdFactory] = None,
                 on_image: Optional[Callable[[ProcessedImage], Any]] = None,
                 on_error: Optional[Callable[[SourceFile, BaseException], Any]] = None,
                 on_done: Optional[Callable[[BatchReport], Any]] = None) -> None:
        self.gallery = gallery
        self.spec = spec
        self.resampler = resampler
        self.ids = ids or IdFactory()
        self.on_image = on_image
        self.on_error = on_error
        self.on_done = on_done

    def iter_batch(self, files: Iterable[SourceFile]) -> AsyncIterator[BatchOutcome]:
        """Start every file at once and yield outcomes as they complete.

        Gallery appends happen inside each task, so they follow completion
        order even if the consumer of this iterator is slow.  The ``on_done``
        listener fires after the last outcome has been yielded; an empty
        selection yields nothing and still signals completion.
        """
        return self._settle(list(files), BatchReport())

    async def run_batch(self, files: Iterable[SourceFile]) -> BatchReport:
        """Process ``files`` concurrently and return once all have settled."""
        report = BatchReport()
        async for _outcome in self._settle(list(files), report):
            pass
        return report

    async def _settle(self, sources: List[SourceFile], report: BatchReport) -> AsyncIterator[BatchOutcome]:
        if sources:
            logger.info("Processing batch of %d file(s)", len(sources))
            tasks = [asyncio.ensure_future(self._run_one(source)) for source in sources]
            for next_done in asyncio.as_completed(tasks):
                outcome = await next_done
                report.add(outcome)
                yield outcome
            logger.info("Batch finished: %d succeeded, %d failed",
                        len(report.succeeded), len(report.failed))
        self._emit(self.on_done, report)

    async def _run_one(self, source: SourceFile) -> BatchOutcome:
        try:
            image = await process(source, self.spec, resampler=self.resampler, ids=self.ids)
        except PipelineError as exc:
            logger.warning("Skipping %s: %s", source.name, exc)
            self._emit(self.on_error, source, exc)
            return BatchOutcome(source=source, error=exc)
        except Exception as exc:
            logger.exception("Unexpected failure while processing %s", source.name)
            self._emit(self.on_error, source, exc)
            return BatchOutcome(source=source, error=exc)
        try:
            self.gallery.append(image)
        except ValueError as exc:
            logger.error("Could not add %s to the gallery: %s", source.name, exc)
            self._emit(self.on_error, source, exc)
            return BatchOutcome(source=source, error=exc)
        self._emit(self.on_image, image)
        return BatchOutcome(source=source, image=image)

    @staticmethod
    def _emit(listener: Optional[Callable[..., Any]], *args: Any) -> None:
        if listener is None:
            return
        try:
            listener(*args)
        except Exception:
            logger.exception("Batch listener %r failed", listener)
