from __future__ import annotations

from pathlib import Path


class CardError(Exception):
    """Base class for every failure raised while turning an image into a card."""

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        msg = super().__str__()
        if self.path is not None:
            return f"{self.path}: {msg}"
        return msg


class InputError(CardError):
    """The images directory (or one of its entries) could not be read."""


class DecodeError(CardError):
    """The source file is not a decodable raster image."""


class EncodeError(CardError):
    """Re-encoding the decoded image as PNG failed."""


class NamingError(CardError):
    """No usable code could be derived from the file name."""


class ParseError(CardError):
    """The composed document is not a well-formed SVG."""


class RenderError(CardError):
    """The rasterizer could not draw the document."""


class WriteError(CardError):
    """An output file could not be written."""
