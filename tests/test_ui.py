import asyncio
import logging

import gradio as gr

from thumbgallery import cli, ui
from thumbgallery.config import GalleryConfig, ThumbnailSpec

from conftest import make_source


def _upload(tmp_path, *sources):
    paths = []
    for source in sources:
        path = tmp_path / source.name
        path.write_bytes(source.data)
        paths.append(str(path))
    return paths


def _collect(paths, session, spec=ThumbnailSpec(400)):
    async def run():
        return [frame async for frame in ui.handle_files(paths, session, spec)]

    return asyncio.run(run())


def test_read_sources_skips_missing_files(tmp_path):
    good = tmp_path / "good.jpg"
    good.write_bytes(make_source(20, 10).data)
    sources, unreadable = ui.read_sources([str(good), str(tmp_path / "gone.jpg")])
    assert [s.name for s in sources] == ["good.jpg"]
    assert sources[0].mime_type == "image/jpeg"
    assert unreadable == ["gone.jpg"]


def test_read_sources_handles_empty_selection():
    assert ui.read_sources(None) == ([], [])


def test_new_session_has_empty_gallery():
    session = ui.new_session(ThumbnailSpec(300))
    assert session.gallery.count() == 0
    assert session.spec.max_edge == 300


def test_handle_files_streams_one_frame_per_success(tmp_path):
    paths = _upload(tmp_path, make_source(800, 400, name="a.jpg"), make_source(400, 800, name="b.jpg"))
    frames = _collect(paths, None)
    # announce + one per image + final
    assert len(frames) == 4
    session = frames[0][0]
    assert all(frame[0] is session for frame in frames)
    assert frames[0][3] == "No images selected"
    assert frames[0][1]["visible"] is True
    assert frames[1][3] == "1 image selected"
    assert frames[2][3] == "2 images selected"
    final = frames[-1]
    assert final[1]["visible"] is False
    assert final[2].count("image-card") == 2
    assert final[4]["visible"] is True
    assert session.gallery.count() == 2


def test_handle_files_skips_failures(tmp_path):
    broken = tmp_path / "broken.jpg"
    broken.write_bytes(b"not an image")
    paths = _upload(tmp_path, make_source(300, 200, name="ok.jpg")) + [str(broken)]
    frames = _collect(paths, None)
    assert len(frames) == 3
    assert frames[-1][3] == "1 image selected"
    assert "broken.jpg" not in frames[-1][2]


def test_handle_files_reuses_session(tmp_path):
    session = ui.new_session(ThumbnailSpec(400))
    _collect(_upload(tmp_path, make_source(120, 80, name="first.jpg")), session)
    frames = _collect(_upload(tmp_path, make_source(80, 120, name="second.jpg")), session)
    assert frames[-1][0] is session
    assert [image.name for image in session.gallery] == ["first.jpg", "second.jpg"]


def test_handle_files_with_no_selection():
    frames = _collect(None, None)
    assert len(frames) == 1
    assert frames[0][3] == "No images selected"
    assert frames[0][4]["visible"] is False


def test_handle_clear_resets_gallery_and_picker(tmp_path):
    session = _collect(_upload(tmp_path, make_source(200, 100, name="x.jpg")), None)[-1][0]
    assert session.gallery.count() == 1
    returned, file_input, gallery_html, count_text, clear_button = ui.handle_clear(session, ThumbnailSpec(400))
    assert returned is session
    assert file_input is None
    assert "image-card" not in gallery_html
    assert count_text == "No images selected"
    assert clear_button["visible"] is False
    assert session.gallery.count() == 0


def test_build_app_returns_blocks():
    assert isinstance(ui.build_app(GalleryConfig()), gr.Blocks)


def test_cli_launches_ui_with_parsed_config(monkeypatch, caplog):
    launched = []
    monkeypatch.setattr(cli, "launch_ui", launched.append)
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: None)
    caplog.set_level(logging.INFO, logger="thumbgallery.cli")
    cli.main(["--max-edge", "128", "--port", "9000"])
    assert len(launched) == 1
    assert launched[0].max_edge == 128
    assert launched[0].port == 9000
    assert "--max-edge 128 --port 9000" in caplog.text
