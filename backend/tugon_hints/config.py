from pathlib import Path

from pydantic_settings import BaseSettings
from functools import lru_cache

_DEFAULT_CONTENT_DIR = Path(__file__).parent / "content"


class Settings(BaseSettings):
    # Optional: without a key the AI producer runs in stub mode
    gemini_api_key: str = ""

    gemini_text_model: str = "gemini-2.5-flash"
    gemini_stub: bool = False          # set GEMINI_STUB=true to skip real API calls
    ai_hint_max_tokens: int = 150
    ai_hint_temperature: float = 0.7

    hint_content_dir: Path = _DEFAULT_CONTENT_DIR
    template_cache_seconds: int = 86400

    cors_origins: list[str] = ["http://localhost:5173"]
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
