"""
HTML rendering of the gallery.

Each processed image is shown as a comparison card: the original and its
thumbnail side by side, the processing time, both byte sizes and the
compression ratio.  Pages are plain HTML strings with inline styles so they
can be dropped into a Gradio ``HTML`` component; every user supplied value
is escaped.
"""

from __future__ import annotations

import html
from typing import Iterable

from .thumbnails import ProcessedImage

_SIZE_UNITS = ["B", "KB", "MB", "GB"]

_CARD_STYLE = ("border:1px solid #ddd;border-radius:8px;padding:12px;"
               "margin-bottom:12px;background:#fff;color:#222;")
_IMG_STYLE = "max-width:100%;max-height:400px;object-fit:contain;display:block;margin:0 auto;"


def format_file_size(num_bytes: int) -> str:
    """Return a short human readable size such as ``"1.5 KB"``."""
    if num_bytes <= 0:
        return "0 B"
    exponent = 0
    while exponent < len(_SIZE_UNITS) - 1 and num_bytes >= 1024 ** (exponent + 1):
        exponent += 1
    value = num_bytes / (1024 ** exponent)
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[exponent]}"


def compression_ratio(original_size: int, thumbnail_size: int) -> float:
    """Percentage of bytes saved by the thumbnail (negative if it grew)."""
    if original_size <= 0:
        return 0.0
    return (1 - thumbnail_size / original_size) * 100


def count_label(count: int) -> str:
    if count == 0:
        return "No images selected"
    return f"{count} image{'s' if count != 1 else ''} selected"


def render_card(image: ProcessedImage) -> str:
    """Return the HTML comparison card for one image."""
    name = html.escape(image.name)
    width, height = image.thumbnail_dimensions
    return (
        f"<div class='image-card' id='{html.escape(image.id)}' style='{_CARD_STYLE}'>\n"
        "<div style='display:flex;justify-content:space-between;font-weight:bold;margin-bottom:8px;'>"
        f"<span class='image-name' title='{name}'>{name}</span>"
        f"<span class='image-size'>{format_file_size(image.original_size)}</span></div>\n"
        "<div style='display:grid;grid-template-columns:1fr 1fr;gap:12px;align-items:start;'>\n"
        "<div style='text-align:center;'>"
        f"<img src='{html.escape(image.original_data_url)}' alt='Original' style='{_IMG_STYLE}'/>"
        "<div>Original</div></div>\n"
        "<div style='text-align:center;'>"
        f"<img src='{html.escape(image.thumbnail_data_url)}' alt='Thumbnail' style='{_IMG_STYLE}'/>"
        f"<div>Thumbnail ({width}&times;{height})</div>"
        f"<div class='thumbnail-time'>&#9889; {image.processing_time_ms:.2f} ms</div></div>\n"
        "</div>\n"
        "<div class='image-info' style='display:flex;gap:24px;margin-top:8px;'>"
        f"<span>Original size: {format_file_size(image.original_size)}</span>"
        f"<span>Thumbnail size: {format_file_size(image.thumbnail_size)}</span>"
        f"<span>Compression: {compression_ratio(image.original_size, image.thumbnail_size):.1f}%</span>"
        "</div>\n"
        "</div>"
    )


def render_gallery(images: Iterable[ProcessedImage]) -> str:
    """Return the HTML for all cards, in the given order."""
    cards = [render_card(image) for image in images]
    return "<div class='gallery'>\n" + "\n".join(cards) + "\n</div>"
