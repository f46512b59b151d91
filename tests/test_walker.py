import io
import logging
from pathlib import Path

import pytest
from PIL import Image

import main as entry
from cardmaker.config import Settings
from cardmaker.errors import DecodeError, InputError, NamingError, WriteError
from cardmaker.walker import iter_candidates, run_batch


def test_iter_candidates_filters_entries(workdir: Path, make_png):
    images = workdir / "images"
    make_png(images / "A.png")
    make_png(images / "B.PNG")
    make_png(images / "C.jpg")
    (images / "sub.png").mkdir()
    (images / "notes").write_text("x")

    assert [p.name for p in iter_candidates(images)] == ["A.png"]


def test_iter_candidates_missing_dir(tmp_path: Path):
    with pytest.raises(InputError):
        list(iter_candidates(tmp_path / "images"))


def test_iter_candidates_skips_symlinks(workdir: Path, make_png):
    real = make_png(workdir / "real.png")
    link = workdir / "images" / "link.png"
    link.symlink_to(real)

    assert link.exists()
    assert list(iter_candidates(workdir / "images")) == []


def test_iter_candidates_not_a_directory(tmp_path: Path):
    target = tmp_path / "images"
    target.write_text("not a dir")
    with pytest.raises(InputError) as info:
        list(iter_candidates(target))
    assert info.value.path == target


def test_convert_end_to_end(workdir: Path, make_png, pipeline):
    src = make_png(workdir / "images" / "CARD1.png")

    out = pipeline.convert(src)

    assert out == workdir / "export" / "CARD1.png"
    assert not (workdir / "export" / "CARD1.svg").exists()
    with Image.open(out) as img:
        assert img.format == "PNG"
        assert img.size == (750, 600)
        r, g, b = img.convert("RGB").getpixel((375, 235))
    # centre of the embedded image
    assert r > 200 and g < 60 and b < 60


def test_convert_writes_debug_svg(workdir: Path, make_png, pipeline, monkeypatch):
    from dataclasses import replace

    from cardmaker import walker

    seen = []
    real_render = walker.render_svg

    def spy(text, fonts):
        seen.append(text)
        return real_render(text, fonts)

    monkeypatch.setattr(walker, "render_svg", spy)
    src = make_png(workdir / "images" / "CARD1.png")

    replace(pipeline, svg_debug=True).convert(src)

    debug = workdir / "export" / "CARD1.svg"
    assert debug.read_text(encoding="utf-8") == seen[0]
    assert "CARD1" in seen[0]
    assert "data:image/png;base64," in seen[0]


def test_convert_naming_error(workdir: Path, make_png, pipeline):
    src = make_png(workdir / "images" / ".png")
    with pytest.raises(NamingError):
        pipeline.convert(src)
    assert list((workdir / "export").iterdir()) == []


def test_convert_missing_export_dir(workdir: Path, make_png, pipeline):
    (workdir / "export").rmdir()
    src = make_png(workdir / "images" / "X.png")
    with pytest.raises(WriteError) as info:
        pipeline.convert(src)
    assert not (workdir / "export").exists()
    assert info.value.path is not None


def test_run_batch_halts_on_first_error(workdir: Path, pipeline, caplog):
    (workdir / "images" / "bad1.png").write_bytes(b"nope")
    (workdir / "images" / "bad2.png").write_bytes(b"nope either")
    settings = Settings(base_dir=workdir)

    with caplog.at_level(logging.INFO):
        report = run_batch(settings, pipeline)

    assert report.halted
    assert not report.ok
    assert len(report.failures) == 1
    assert report.converted == []
    assert isinstance(report.failures[0][1], DecodeError)
    assert caplog.text.count("Creating image for") == 1


def test_run_batch_halt_leaves_other_files_untouched(workdir: Path, make_png, pipeline):
    (workdir / "images" / "bad.png").write_bytes(b"nope")
    make_png(workdir / "images" / "good.png")
    settings = Settings(base_dir=workdir)

    report = run_batch(settings, pipeline)

    assert report.halted
    assert len(report.failures) == 1
    assert len(report.converted) <= 1


def test_run_batch_continue_on_error(workdir: Path, make_png, pipeline):
    (workdir / "images" / "bad.png").write_bytes(b"nope")
    make_png(workdir / "images" / "good.png")
    settings = Settings(base_dir=workdir, continue_on_error=True)

    report = run_batch(settings, pipeline)

    assert not report.halted
    assert report.converted == [workdir / "export" / "good.png"]
    assert [p.name for p, _ in report.failures] == ["bad.png"]


@pytest.fixture
def run_main(monkeypatch: pytest.MonkeyPatch):
    for name in (
        "BASE_DIR",
        "SVG_DEBUG",
        "CARD_MESSAGE",
        "CONTINUE_ON_ERROR",
        "ESCAPE_XML",
        "STRICT_EXIT",
        "LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(entry, "load_dotenv", lambda: False)

    def _run(cwd: Path) -> int:
        monkeypatch.chdir(cwd)
        return entry.main()

    return _run


def test_main_success(workdir: Path, make_png, run_main, monkeypatch):
    make_png(workdir / "images" / "CARD1.png")
    monkeypatch.setenv("SVG_DEBUG", "1")

    assert run_main(workdir) == entry.EXIT_OK
    assert (workdir / "export" / "CARD1.png").exists()
    assert (workdir / "export" / "CARD1.svg").exists()


def test_main_halted_scan_still_exits_ok(workdir: Path, run_main):
    (workdir / "images" / "broken.png").write_bytes(b"\x89PNG nope")
    assert run_main(workdir) == entry.EXIT_OK
    assert list((workdir / "export").iterdir()) == []


def test_main_strict_exit_reports_failure(workdir: Path, run_main, monkeypatch):
    (workdir / "images" / "broken.png").write_bytes(b"\x89PNG nope")
    monkeypatch.setenv("STRICT_EXIT", "1")
    assert run_main(workdir) == entry.EXIT_FAILED


def test_main_missing_images_dir(tmp_path: Path, run_main):
    assert run_main(tmp_path) == entry.EXIT_INPUT
