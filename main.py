from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler

from dotenv import load_dotenv

from cardmaker.compose import load_template
from cardmaker.config import Settings, load_settings
from cardmaker.errors import InputError
from cardmaker.fonts import load_default_font
from cardmaker.walker import CardPipeline, run_batch

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INPUT = 2


def setup_logging(settings: Settings) -> None:
    # Console always; optional rotating file
    log_format = "%(asctime)s %(levelname)s %(name)s %(message)s"
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=log_format)
    if settings.log_file:
        try:
            settings.log_file.parent.mkdir(parents=True, exist_ok=True)
            fh = RotatingFileHandler(
                settings.log_file,
                maxBytes=settings.log_max_bytes,
                backupCount=settings.log_backups,
                encoding="utf-8",
            )
            fh.setLevel(level)
            fh.setFormatter(logging.Formatter(log_format))
            root = logging.getLogger()
            root.addHandler(fh)
        except Exception:
            logging.exception("Failed to set up file logging")


def main() -> int:
    # Load .env if present
    load_dotenv()

    settings = load_settings()
    setup_logging(settings)

    pipeline = CardPipeline(
        template=load_template(),
        fonts=load_default_font(),
        message=settings.message,
        export_dir=settings.export_dir,
        svg_debug=settings.svg_debug,
        escape_values=settings.escape_values,
    )

    logging.info("Scanning %s", settings.images_dir)
    try:
        report = run_batch(settings, pipeline)
    except InputError as exc:
        logging.error("%s", exc)
        return EXIT_INPUT

    logging.info(
        "Done: %d converted, %d failed%s",
        len(report.converted),
        len(report.failures),
        " (scan halted)" if report.halted else "",
    )
    if settings.strict_exit and not report.ok:
        return EXIT_FAILED
    return EXIT_OK


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(130)
