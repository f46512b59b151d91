from __future__ import annotations

from pathlib import Path
from xml.sax.saxutils import escape

from .encoder import data_url

ASSETS_DIR = Path(__file__).resolve().parent / "assets"
TEMPLATE_PATH = ASSETS_DIR / "template.svg"

IMAGE_TOKEN = "DATA_IMAGE_URL"
CODE_TOKEN = "__CODE"
MESSAGE_TOKEN = "__MESSAGE"

_ATTR_ENTITIES = {'"': "&quot;"}


def load_template(path: Path = TEMPLATE_PATH) -> str:
    return path.read_text(encoding="utf-8")


def compose(
    template: str,
    payload: str,
    code: str,
    message: str,
    *,
    escape_values: bool = False,
) -> str:
    """Fill the template's image, code and message tokens.

    Replacement is literal and covers every occurrence of a token. Code and
    message are inserted verbatim unless ``escape_values`` is set, in which
    case XML special characters are escaped first.
    """
    if escape_values:
        code = escape(code, _ATTR_ENTITIES)
        message = escape(message, _ATTR_ENTITIES)
    return (
        template.replace(IMAGE_TOKEN, data_url(payload))
        .replace(CODE_TOKEN, code)
        .replace(MESSAGE_TOKEN, message)
    )
