# tutushop/config.py
import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Settings are built once at startup and passed to the app, store and upload handlers.

PACKAGE_DIR = Path(__file__).resolve().parent
MIB = 1024 * 1024


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    base_dir: Path = Field(default_factory=Path.cwd)
    data_dir: Optional[Path] = None
    uploads_dir: Optional[Path] = None
    static_dir: Path = PACKAGE_DIR / "static"
    index_file: str = "tutushop.html"
    host: str = "0.0.0.0"
    port: int = 3000
    image_max_bytes: int = 10 * MIB
    audio_max_bytes: int = 50 * MIB
    serialize_writes: bool = True
    log_level: str = "INFO"
    log_dir: Optional[Path] = None

    def model_post_init(self, context: Any) -> None:
        if self.data_dir is None:
            self.data_dir = self.base_dir / "data"
        if self.uploads_dir is None:
            self.uploads_dir = self.base_dir / "uploads"

    @property
    def images_dir(self) -> Path:
        return self.uploads_dir / "images"

    @property
    def audio_dir(self) -> Path:
        return self.uploads_dir / "audio"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment (and a .env file if present)."""
        load_dotenv()
        base_dir = Path(os.getenv("TUTUSHOP_BASE_DIR", os.getcwd())).resolve()
        log_dir = os.getenv("TUTUSHOP_LOG_DIR")
        return cls(
            base_dir=base_dir,
            host=os.getenv("TUTUSHOP_HOST", "0.0.0.0"),
            port=int(os.getenv("TUTUSHOP_PORT", "3000")),
            serialize_writes=_env_bool("TUTUSHOP_SERIALIZE_WRITES", True),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_dir=Path(log_dir) if log_dir else None,
        )

    def ensure_directories(self) -> None:
        for d in (self.data_dir, self.uploads_dir, self.images_dir, self.audio_dir):
            d.mkdir(parents=True, exist_ok=True)
