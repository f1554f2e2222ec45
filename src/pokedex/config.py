from dataclasses import dataclass, field
from pathlib import Path
from dotenv import load_dotenv
import os

#Load .env at import time for convenience
load_dotenv(dotenv_path=Path(".") / '.env')


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass
class Settings:
    API_BASE: str = field(default_factory=lambda: os.getenv("POKEDEX_API_BASE", "https://pokeapi.co/api/v2").rstrip("/"))
    HTTP_TIMEOUT: float = field(default_factory=lambda: _float_env("POKEDEX_HTTP_TIMEOUT", 15.0))
    DEFAULT_QUERY: str = field(default_factory=lambda: os.getenv("POKEDEX_DEFAULT_QUERY", "pikachu"))
    EXPORT_DIR: Path = field(default_factory=lambda: Path(os.getenv("POKEDEX_EXPORT_DIR", "out")))
    LOG_LEVEL: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

settings = Settings()
