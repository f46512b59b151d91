from pathlib import Path

import pytest
from PIL import Image

from cardmaker.compose import load_template
from cardmaker.fonts import FontDatabase, load_default_font
from cardmaker.walker import CardPipeline


@pytest.fixture(scope="session")
def fonts() -> FontDatabase:
    return load_default_font()


@pytest.fixture(scope="session")
def template() -> str:
    return load_template()


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    (tmp_path / "images").mkdir()
    (tmp_path / "export").mkdir()
    return tmp_path


def _make_png(path: Path, size: tuple[int, int] = (10, 10), color=(255, 0, 0)) -> Path:
    Image.new("RGB", size, color).save(path, format="PNG")
    return path


@pytest.fixture
def make_png():
    return _make_png


@pytest.fixture
def pipeline(workdir: Path, template: str, fonts: FontDatabase) -> CardPipeline:
    return CardPipeline(
        template=template, fonts=fonts, message="hello", export_dir=workdir / "export"
    )
