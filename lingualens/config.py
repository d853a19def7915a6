from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Redis
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0

    # CORS
    cors_origins: list[str] = ["http://localhost:9002"]

    # Gemini API
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"

    # Extraction / Translation
    extraction_provider: str = "gemini"  # "gemini"
    translation_provider: str = "gemini"  # "gemini"

    # Camera
    camera_provider: str = "opencv"  # "opencv"
    camera_front_index: int = 0
    camera_back_index: int = 1
    camera_jpeg_quality: int = 92
    probe_camera_on_startup: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
