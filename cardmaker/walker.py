from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from .compose import compose
from .config import Settings
from .encoder import encode_image
from .errors import CardError, InputError
from .fonts import FontDatabase
from .render import render_svg
from .utils import derive_code, human_bytes, split_name, write_bytes, write_text

log = logging.getLogger(__name__)


@dataclass
class BatchReport:
    converted: list[Path] = field(default_factory=list)
    failures: list[tuple[Path, CardError]] = field(default_factory=list)
    halted: bool = False

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class CardPipeline:
    """Everything needed to turn one source image into a card.

    Template and font are passed in rather than read from module globals so
    tests can swap them.
    """

    template: str
    fonts: FontDatabase
    message: str
    export_dir: Path
    svg_debug: bool = False
    escape_values: bool = False

    def convert(self, path: Path) -> Path:
        try:
            return self._convert(path)
        except CardError as exc:
            if exc.path is None:
                exc.path = path
            raise

    def _convert(self, path: Path) -> Path:
        code = derive_code(path)
        payload = encode_image(path)
        document = compose(
            self.template, payload, code, self.message, escape_values=self.escape_values
        )

        if self.svg_debug:
            write_text(self.export_dir / f"{code}.svg", document)

        png = render_svg(document, self.fonts)
        target = self.export_dir / f"{code}.png"
        write_bytes(target, png)
        return target


def iter_candidates(images_dir: Path) -> Iterator[Path]:
    """Yield regular ``*.png`` files directly inside ``images_dir``.

    The extension match is exact and case-sensitive. Order is whatever the
    filesystem returns.
    """
    try:
        with os.scandir(images_dir) as it:
            for entry in it:
                try:
                    is_file = entry.is_file(follow_symlinks=False)
                except OSError as exc:
                    raise InputError(f"Could not read entry: {exc}", Path(entry.path)) from exc
                if is_file and split_name(entry.name)[1] == "png":
                    yield Path(entry.path)
    except OSError as exc:
        raise InputError(f"Could not read images directory: {exc.strerror or exc}", images_dir) from exc


def run_batch(settings: Settings, pipeline: CardPipeline) -> BatchReport:
    """Convert every candidate image, stopping at the first failure unless
    ``settings.continue_on_error`` is set.

    InputError from listing the directory propagates to the caller.
    """
    report = BatchReport()
    for path in iter_candidates(settings.images_dir):
        log.info("Creating image for %s", path.name)
        try:
            target = pipeline.convert(path)
        except CardError as exc:
            log.error("%s", exc)
            report.failures.append((path, exc))
            if settings.continue_on_error:
                continue
            report.halted = True
            break
        size = target.stat().st_size
        log.info("Successfully created image %s (%s)", target, human_bytes(size))
        report.converted.append(target)
    return report
