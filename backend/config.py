from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


def _load_version() -> str:
    version_path = Path(__file__).resolve().parent / "VERSION"
    try:
        return version_path.read_text().strip()
    except FileNotFoundError:
        return "0.1.0"


class Settings(BaseSettings):
    """Application configuration using Pydantic settings."""

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: list[str] = ["*"]
    CORS_ALLOW_HEADERS: list[str] = ["*"]

    # Application
    APP_NAME: str = "Graph Converter"
    APP_VERSION: str = _load_version()
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ── Writers ────────────────────────────────────────────────────────
    GML_INDENT: int = 2
    GRAPHML_INDENT: int = 2
    # GML node ids are bare tokens; GraphML ids get this prefix ("0" -> "n0")
    GRAPHML_NODE_ID_PREFIX: str = "n"

    # ── Readers ────────────────────────────────────────────────────────
    # True: a value that does not parse as its key's numeric type is an error.
    # False: it is kept as text and a warning is logged.
    STRICT_TYPES: bool = True
    READ_CHUNK_BYTES: int = 64 * 1024

    # ── Scratch buffer for the deferred GraphML <key> block ───────────
    SCRATCH_SPOOL_MAX_BYTES: int = 8 * 1024 * 1024
    SCRATCH_DIR: Optional[str] = None

    # ── HTTP API ───────────────────────────────────────────────────────
    MAX_UPLOAD_BYTES: int = 50 * 1024 * 1024

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
