"""
Command-line entry point for the thumbnail gallery.

This module parses command line arguments, configures logging and launches
the Gradio UI.
"""

from __future__ import annotations

import logging
import sys

from PIL import features

from .config import parse_args
from .ui import launch_ui

logger = logging.getLogger(__name__)


def _codec_preflight() -> None:
    """Warn when Pillow was built without the codecs the gallery relies on.

    This does not stop execution; files in an unsupported format simply
    fail to decode and are reported per file.
    """
    for feature, label in (("jpg", "JPEG"), ("zlib", "PNG"), ("webp", "WebP")):
        if not features.check(feature):
            logger.warning("Pillow was built without %s support; such images will be skipped.", label)


def main(argv: list[str] | None = None) -> None:
    """Entry point called by the ``thumbgallery`` script."""
    cfg = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Invoked as: %s", cfg.command_line)
    _codec_preflight()
    launch_ui(cfg)


if __name__ == "__main__":
    main(sys.argv[1:])
