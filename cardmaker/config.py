import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_MESSAGE = "This is a sample message. TODO: Replace this with something better"

_TRUTHY = {"1", "true", "yes", "y"}


def _env_flag(name: str) -> bool:
    return (os.getenv(name, "false") or "").strip().lower() in _TRUTHY


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_dir: Path
    message: str = DEFAULT_MESSAGE
    # Presence-only: SVG_DEBUG set to anything enables the debug write
    svg_debug: bool = False
    continue_on_error: bool = False
    escape_values: bool = False
    # Exit non-zero when any file failed
    strict_exit: bool = False
    # Logging
    log_file: Path | None = None
    log_level: str = "INFO"
    log_max_bytes: int = 5 * 1024 * 1024
    log_backups: int = 5

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return (v or "INFO").upper()

    @field_validator("base_dir", mode="before")
    @classmethod
    def _ensure_path(cls, v: Path | str) -> Path:
        return Path(v).expanduser().resolve()

    @field_validator("log_file", mode="before")
    @classmethod
    def _ensure_log_path(cls, v: str | Path | None) -> Path | None:
        if not v:
            return None
        return Path(v).expanduser().resolve()

    @field_validator("message", mode="before")
    @classmethod
    def _default_message(cls, v: str | None) -> str:
        return v or DEFAULT_MESSAGE

    @property
    def images_dir(self) -> Path:
        return self.base_dir / "images"

    @property
    def export_dir(self) -> Path:
        return self.base_dir / "export"


def load_settings() -> Settings:
    base_dir_raw = os.getenv("BASE_DIR", "").strip() or os.getcwd()

    # Logging
    log_file_raw = os.getenv("LOG_FILE", "").strip()
    log_level = (os.getenv("LOG_LEVEL", "INFO") or "INFO").upper()
    log_max_bytes = int(os.getenv("LOG_MAX_BYTES", str(5 * 1024 * 1024)))
    log_backups = int(os.getenv("LOG_BACKUPS", "5"))

    return Settings(
        base_dir=base_dir_raw,
        message=os.getenv("CARD_MESSAGE", ""),
        svg_debug="SVG_DEBUG" in os.environ,
        continue_on_error=_env_flag("CONTINUE_ON_ERROR"),
        escape_values=_env_flag("ESCAPE_XML"),
        strict_exit=_env_flag("STRICT_EXIT"),
        log_file=log_file_raw or None,
        log_level=log_level,
        log_max_bytes=log_max_bytes,
        log_backups=log_backups,
    )
