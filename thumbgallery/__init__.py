"""
Top-level package for the browser thumbnail gallery.

Select images in the browser, get an aspect-preserving thumbnail for each,
and compare original and thumbnail side by side with size and timing stats.

The functionality is organised into smaller modules:

- :mod:`thumbgallery.config` – dataclasses for session configuration and command line parsing.
- :mod:`thumbgallery.errors` – the per-file pipeline error taxonomy.
- :mod:`thumbgallery.dimensions` – aspect-preserving target dimensions.
- :mod:`thumbgallery.codec` – async Pillow decode/encode and data URLs.
- :mod:`thumbgallery.resampler` – the resize contract and its Pillow implementation.
- :mod:`thumbgallery.thumbnails` – the per-file decode → resize → encode workflow.
- :mod:`thumbgallery.gallery` – the session's in-memory gallery.
- :mod:`thumbgallery.pipeline` – concurrent batch processing feeding the gallery.
- :mod:`thumbgallery.album` – HTML comparison cards.
- :mod:`thumbgallery.ui` – Gradio interface.

Run the UI from the command line using the `thumbgallery` script installed by
this package.
"""

__all__ = [
    "config",
    "errors",
    "dimensions",
    "codec",
    "resampler",
    "thumbnails",
    "gallery",
    "pipeline",
    "album",
    "ui",
]
