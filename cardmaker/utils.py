from __future__ import annotations

from pathlib import Path

from .errors import NamingError, WriteError


def split_name(name: str) -> tuple[str, str | None]:
    """Split a file name at its last dot into (stem, extension).

    A name without a dot has no extension. A leading dot counts as the
    separator, so ``".png"`` is an empty stem with extension ``png``.
    """
    stem, dot, ext = name.rpartition(".")
    if not dot:
        return name, None
    return stem, ext


def derive_code(path: Path) -> str:
    stem, _ = split_name(path.name)
    if stem in {"", ".", ".."}:
        raise NamingError("Could not find code, file needs to be named <CODE>.png", path)
    return stem


def write_bytes(path: Path, data: bytes) -> None:
    # Never creates the parent; a missing export dir is an error
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as exc:
        raise WriteError(f"Could not write file: {exc.strerror or exc}", path) from exc


def write_text(path: Path, text: str) -> None:
    write_bytes(path, text.encode("utf-8"))


def human_bytes(n: int) -> str:
    step = 1024.0
    units = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    v = float(n)
    while v >= step and i < len(units) - 1:
        v /= step
        i += 1
    return f"{v:.2f} {units[i]}"
