"""
Configuration structures for the thumbnail gallery.

We use :class:`dataclasses.dataclass` to describe the parameters accepted by
the command line interface.  There is deliberately only one tunable that
affects the output, the maximum edge length of generated thumbnails; the
resample quality and the JPEG encode settings are fixed constants of the
pipeline (see :mod:`thumbgallery.resampler` and
:mod:`thumbgallery.thumbnails`).

The :func:`parse_args` function converts command line arguments into a
:class:`GalleryConfig` instance.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Optional

DEFAULT_MAX_EDGE = 400


@dataclass(frozen=True)
class ThumbnailSpec:
    """Per-run thumbnail configuration.

    Attributes
    ----------
    max_edge: int
        Maximum length, in pixels, of the governing (longer) edge of a
        thumbnail.  Must be a positive integer.
    """
    max_edge: int = DEFAULT_MAX_EDGE

    def __post_init__(self) -> None:
        if not isinstance(self.max_edge, int) or self.max_edge < 1:
            raise ValueError(f"max_edge must be a positive integer, got {self.max_edge!r}")


@dataclass
class GalleryConfig:
    """Parameters controlling a gallery session.

    Attributes
    ----------
    max_edge: int
        Maximum side length of generated thumbnails (in pixels).  Thumbnails
        preserve aspect ratio and are never upscaled on the longer edge.
    host: str
        Host address the Gradio server binds to.
    port: int
        Port for the Gradio server.
    log_level: str
        Name of the logging level used by :func:`logging.basicConfig`.
    share: bool
        Whether to ask Gradio for a public share link.
    command_line: Optional[str]
        Full original command line invocation, recorded for diagnostics.
    """
    max_edge: int = DEFAULT_MAX_EDGE
    host: str = "127.0.0.1"
    port: int = 7860
    log_level: str = "INFO"
    share: bool = False
    command_line: Optional[str] = None

    def thumbnail_spec(self) -> ThumbnailSpec:
        """Return the :class:`ThumbnailSpec` used for every run in this session."""
        return ThumbnailSpec(max_edge=self.max_edge)


def parse_args(argv: Optional[list[str]] = None) -> GalleryConfig:
    """Parse command line arguments and return a :class:`GalleryConfig` instance.

    Parameters
    ----------
    argv: list of str, optional
        List of command line arguments.  If omitted, :mod:`sys.argv` will be
        used.  This parameter facilitates testing.

    Returns
    -------
    GalleryConfig
        Populated configuration object.
    """
    parser = argparse.ArgumentParser(
        description="Browser thumbnail gallery",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--max-edge", dest="max_edge", type=int, default=DEFAULT_MAX_EDGE,
                        help="Maximum side length of generated thumbnails (pixels)")
    parser.add_argument("--host", dest="host", type=str, default="127.0.0.1",
                        help="Host address for the UI server")
    parser.add_argument("--port", dest="port", type=int, default=7860,
                        help="Port for the UI server")
    parser.add_argument("--log-level", dest="log_level", type=str, default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging verbosity")
    parser.add_argument("--share", dest="share", action="store_true",
                        help="Create a public Gradio share link")
    args = parser.parse_args(argv)

    if args.max_edge < 1:
        parser.error("--max-edge must be a positive integer")

    return GalleryConfig(
        max_edge=args.max_edge,
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        share=args.share,
        command_line=" ".join([parser.prog] + list(argv or [])),
    )
