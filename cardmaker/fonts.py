from __future__ import annotations

import io
from pathlib import Path

from fontTools.pens.svgPathPen import SVGPathPen
from fontTools.ttLib import TTFont

DEFAULT_FONT_PATH = Path(__file__).resolve().parent / "assets" / "Lato-Regular.ttf"


class FontDatabase:
    """A single font used to turn text into glyph outlines.

    Outlines are returned in font units (y axis pointing up); callers scale
    them by ``font_size / units_per_em`` and flip the y axis.
    """

    def __init__(self, font: TTFont):
        self.font = font
        self.cmap = font.getBestCmap() or {}
        self.glyphs = font.getGlyphSet()
        self.units_per_em = font["head"].unitsPerEm
        self._outlines: dict[str, str] = {}

    @classmethod
    def from_bytes(cls, data: bytes) -> FontDatabase:
        return cls(TTFont(io.BytesIO(data)))

    def glyph_name(self, char: str) -> str:
        return self.cmap.get(ord(char), ".notdef")

    def advance(self, glyph_name: str) -> float:
        return self.glyphs[glyph_name].width

    def outline(self, glyph_name: str) -> str:
        if glyph_name not in self._outlines:
            pen = SVGPathPen(self.glyphs)
            self.glyphs[glyph_name].draw(pen)
            self._outlines[glyph_name] = pen.getCommands()
        return self._outlines[glyph_name]

    def text_width(self, text: str) -> float:
        return sum(self.advance(self.glyph_name(ch)) for ch in text)


def load_default_font(path: Path = DEFAULT_FONT_PATH) -> FontDatabase:
    return FontDatabase.from_bytes(path.read_bytes())
