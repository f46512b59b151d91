"""SVG parsing, text-to-path resolution and rasterization.

The rasterizer is never asked to lay out text: every ``<text>`` element is
replaced by glyph outlines from the bundled font before the tree is handed
to cairosvg, so the output does not depend on fonts installed on the host.
"""
from __future__ import annotations

import io
import re

import cairosvg
from lxml import etree
from PIL import Image

from .errors import ParseError, RenderError
from .fonts import FontDatabase

WIDTH = 750
HEIGHT = 600

SVG_NS = "http://www.w3.org/2000/svg"
XML_SPACE = "{http://www.w3.org/XML/1998/namespace}space"

DEFAULT_FONT_SIZE = 16.0

# Text layout attributes that have no meaning once the text is a group of paths
_TEXT_ONLY_ATTRS = {
    "x",
    "y",
    "dx",
    "dy",
    "rotate",
    "textLength",
    "lengthAdjust",
    "text-anchor",
    "font-family",
    "font-size",
    "font-style",
    "font-weight",
    "letter-spacing",
    "word-spacing",
}

_NUMBER = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")

_PARSER = etree.XMLParser(huge_tree=True, resolve_entities=False, no_network=True)


def _svg(tag: str) -> str:
    return f"{{{SVG_NS}}}{tag}"


def _fmt(v: float) -> str:
    return f"{v:g}"


def _style(el: etree._Element) -> dict[str, str]:
    props: dict[str, str] = {}
    for decl in (el.get("style") or "").split(";"):
        name, sep, value = decl.partition(":")
        if sep:
            props[name.strip()] = value.strip()
    return props


def _inherited(el: etree._Element, name: str) -> str | None:
    """Look a presentation property up on the element, then its ancestors."""
    node: etree._Element | None = el
    while node is not None:
        value = _style(node).get(name) or node.get(name)
        if value:
            return value
        node = node.getparent()
    return None


def _number(raw: str | None, default: float) -> float:
    if not raw:
        return default
    m = _NUMBER.search(raw)
    return float(m.group(0)) if m else default


def _text_content(el: etree._Element) -> str:
    text = "".join(el.itertext())
    if el.get(XML_SPACE) == "preserve":
        return re.sub(r"[\n\r\t]", " ", text)
    return " ".join(text.split())


def parse_svg(text: str) -> etree._Element:
    try:
        root = etree.fromstring(text.encode("utf-8"), _PARSER)
    except etree.XMLSyntaxError as exc:
        raise ParseError(f"Invalid SVG document: {exc}") from exc
    if etree.QName(root).localname != "svg":
        raise ParseError(f"Root element is <{etree.QName(root).localname}>, expected <svg>")
    return root


def text_to_path(el: etree._Element, fonts: FontDatabase) -> None:
    """Turn one ``<text>`` element into a ``<g>`` of glyph outlines, in place.

    Position, size and anchor come from the element (or inherited styles);
    other presentation attributes such as fill and transform stay on the
    group. The original string is kept as the group's ``aria-label``.
    """
    text = _text_content(el)
    x = _number(el.get("x"), 0.0)
    y = _number(el.get("y"), 0.0)
    size = _number(_inherited(el, "font-size"), DEFAULT_FONT_SIZE)
    anchor = _inherited(el, "text-anchor") or "start"

    kept = {k: v for k, v in el.attrib.items() if k not in _TEXT_ONLY_ATTRS and k != XML_SPACE}
    tail = el.tail
    el.clear()
    el.tag = _svg("g") if etree.QName(el).namespace == SVG_NS else "g"
    el.attrib.update(kept)
    el.set("aria-label", text)
    el.tail = tail

    if not text:
        return

    width = fonts.text_width(text)
    pen_x = {"middle": -width / 2, "end": -width}.get(anchor, 0.0)
    scale = size / fonts.units_per_em
    glyphs = etree.SubElement(el, el.tag)
    glyphs.set("transform", f"translate({_fmt(x)} {_fmt(y)}) scale({_fmt(scale)} {_fmt(-scale)})")
    for ch in text:
        name = fonts.glyph_name(ch)
        d = fonts.outline(name)
        if d:
            path = etree.SubElement(glyphs, _svg("path") if el.tag == _svg("g") else "path")
            path.set("d", d)
            path.set("transform", f"translate({_fmt(pen_x)} 0)")
        pen_x += fonts.advance(name)


def resolve_text(root: etree._Element, fonts: FontDatabase) -> etree._Element:
    for el in list(root.iter(_svg("text"), "text")):
        text_to_path(el, fonts)
    return root


def rasterize(root: etree._Element) -> bytes:
    """Draw the tree onto a WIDTH x HEIGHT canvas and return it as PNG bytes.

    The document is drawn at its own size with the identity transform and
    placed at the canvas origin. Anything beyond the canvas is clipped and
    canvas area the document does not cover stays transparent.
    """
    data = etree.tostring(root, encoding="utf-8", xml_declaration=True)
    try:
        drawn = cairosvg.svg2png(bytestring=data)
    except Exception as exc:
        raise RenderError(f"Could not rasterize SVG: {exc}") from exc

    canvas = Image.new("RGBA", (WIDTH, HEIGHT), (0, 0, 0, 0))
    with Image.open(io.BytesIO(drawn)) as img:
        canvas.paste(img.convert("RGBA"), (0, 0))
    out = io.BytesIO()
    canvas.save(out, format="PNG")
    return out.getvalue()


def render_svg(text: str, fonts: FontDatabase) -> bytes:
    root = parse_svg(text)
    resolve_text(root, fonts)
    return rasterize(root)
