from __future__ import annotations

import base64
import io
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from .errors import DecodeError, EncodeError


def encode_image(path: Path) -> str:
    """Decode an image file, re-encode it as PNG and return it as base64 text.

    The format is detected from the file content, so any raster format Pillow
    can read is accepted. The result uses the standard alphabet without line
    wrapping.

    Raises:
        DecodeError: the file cannot be opened or is not a decodable image.
        EncodeError: writing the decoded pixels as PNG failed.
    """
    try:
        with Image.open(path) as img:
            img.load()
            decoded = img.copy()
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise DecodeError(f"Could not decode image: {exc}", path) from exc

    buf = io.BytesIO()
    try:
        decoded.save(buf, format="PNG")
    except (OSError, ValueError) as exc:
        raise EncodeError(f"Could not encode image as PNG: {exc}", path) from exc

    return base64.b64encode(buf.getvalue()).decode("ascii")


def data_url(payload: str) -> str:
    return f"data:image/png;base64,{payload}"
