"""
Gradio user interface for the thumbnail gallery.

The page has a multi-file image picker, a count line with a "Clear all"
button, and the gallery of comparison cards.  Each browser session gets its
own :class:`~thumbgallery.pipeline.BatchCoordinator` (and therefore its own
gallery) held in a ``gr.State``.  Selected files are processed
concurrently and the gallery is re-rendered as each one completes.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, AsyncIterator, List, Optional, Sequence, Tuple

import gradio as gr

from .album import count_label, render_gallery
from .codec import SourceFile
from .config import GalleryConfig, ThumbnailSpec
from .gallery import GalleryState
from .pipeline import BatchCoordinator, BatchReport

logger = logging.getLogger(__name__)


def new_session(spec: ThumbnailSpec) -> BatchCoordinator:
    """Create the coordinator (and empty gallery) for one browser session."""
    return BatchCoordinator(GalleryState(), spec)


def read_sources(paths: Optional[Sequence[Any]]) -> Tuple[List[SourceFile], List[str]]:
    """Load uploaded files into :class:`SourceFile` values.

    Returns the readable sources and the names of files that could not be
    read from Gradio's upload directory.
    """
    sources: List[SourceFile] = []
    unreadable: List[str] = []
    for item in paths or []:
        # Older Gradio versions hand over tempfile wrappers instead of paths
        path = Path(getattr(item, "name", item))
        try:
            sources.append(SourceFile.from_path(path))
        except OSError as exc:
            logger.warning("Could not read uploaded file %s: %s", path.name, exc)
            unreadable.append(path.name)
    return sources, unreadable


def _clear_button(session: BatchCoordinator) -> Any:
    return gr.update(visible=session.gallery.count() > 0)


def _frame(session: BatchCoordinator, status: Any) -> Tuple[Any, ...]:
    return (session, status, render_gallery(session.gallery),
            count_label(session.gallery.count()), _clear_button(session))


async def handle_files(paths: Optional[Sequence[Any]], session: Optional[BatchCoordinator],
                       spec: ThumbnailSpec) -> AsyncIterator[Tuple[Any, ...]]:
    """Process an upload and yield UI frames as the gallery fills.

    Each frame is ``(session, status, gallery_html, count_text, clear_button)``.
    One frame announces the batch, one follows every successful image, and
    a final frame hides the status line once every file has settled.
    """
    session = session or new_session(spec)
    sources, unreadable = read_sources(paths)
    if not sources:
        yield _frame(session, gr.update(visible=False))
        return
    yield _frame(session, gr.update(value=f"Processing {len(sources)} image(s)...", visible=True))
    report = BatchReport()
    async for outcome in session.iter_batch(sources):
        report.add(outcome)
        if outcome.ok:
            yield _frame(session, gr.update())
    failed = [o.source.name for o in report.failed] + unreadable
    if failed:
        gr.Warning("Could not process: " + ", ".join(failed)
                   + ". Make sure the selected files are valid images.")
    yield _frame(session, gr.update(value="", visible=False))


def handle_clear(session: Optional[BatchCoordinator], spec: ThumbnailSpec) -> Tuple[Any, ...]:
    """Empty the gallery and reset the file picker.

    Returns ``(session, file_input, gallery_html, count_text, clear_button)``;
    ``None`` for the file input clears the browser's selection.
    """
    session = session or new_session(spec)
    session.gallery.clear()
    return session, None, render_gallery(session.gallery), count_label(0), gr.update(visible=False)


def build_app(config: GalleryConfig) -> gr.Blocks:
    """Build the Gradio ``Blocks`` app without launching it."""
    spec = config.thumbnail_spec()

    with gr.Blocks(title="Thumbnail Gallery") as demo:
        gr.Markdown("# Thumbnail Gallery")
        gr.Markdown(f"Thumbnails are resized so the longer edge is at most {spec.max_edge} px.")
        session_state = gr.State(None)
        file_input = gr.File(label="Select images", file_count="multiple",
                             file_types=["image"], type="filepath")
        with gr.Row():
            count_text = gr.Markdown(count_label(0))
            clear_btn = gr.Button("Clear all", visible=False)
        status = gr.Markdown("", visible=False)
        gallery_html = gr.HTML(render_gallery([]))

        async def on_upload(paths, session):
            async for frame in handle_files(paths, session, spec):
                yield frame

        def on_clear(session):
            return handle_clear(session, spec)

        file_input.upload(
            on_upload,
            inputs=[file_input, session_state],
            outputs=[session_state, status, gallery_html, count_text, clear_btn],
        )
        clear_btn.click(
            on_clear,
            inputs=session_state,
            outputs=[session_state, file_input, gallery_html, count_text, clear_btn],
        )
    return demo


def launch_ui(config: GalleryConfig) -> None:
    """Launch the Gradio gallery UI.

    Parameters
    ----------
    config: GalleryConfig
        Thumbnail size plus the host/port the server binds to.
    """
    demo = build_app(config)
    logger.info("Starting gallery UI on %s:%d (max edge %d px)",
                config.host, config.port, config.max_edge)
    demo.queue().launch(server_name=config.host, server_port=config.port, share=config.share)
