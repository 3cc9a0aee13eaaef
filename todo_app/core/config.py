# todo_app/core/config.py

from functools import lru_cache
from pathlib import Path

from loguru import logger
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def find_dotenv_path(filename: str = ".env", usecwd: bool = False) -> str | None:
    """Walks up from this file (or the CWD) looking for a dotenv file."""
    start_dir = Path.cwd() if usecwd else Path(__file__).resolve().parent
    current_dir = start_dir
    for _ in range(10):
        env_path = current_dir / filename
        if env_path.is_file():
            logger.debug(f"Found {filename} file at: {env_path}")
            return str(env_path)
        parent_dir = current_dir.parent
        if parent_dir == current_dir:
            break
        current_dir = parent_dir
    if not usecwd:
        env_path_cwd = Path.cwd() / filename
        if env_path_cwd.is_file():
            logger.debug(f"Found {filename} file at CWD: {env_path_cwd}")
            return str(env_path_cwd)
    return None


class Settings(BaseSettings):
    PROJECT_NAME: str = "Todo Tracker"
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./todo.db")
    DATABASE_ECHO: bool = False

    # HTTP
    FRONTEND_ORIGIN: str = "http://localhost:3000"
    HOST: str = "127.0.0.1"
    PORT: int = 3001

    model_config = SettingsConfigDict(
        env_file=tuple(p for p in (find_dotenv_path(".env"), find_dotenv_path(".env.local")) if p),
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


@lru_cache()
def get_settings() -> Settings:
    """Loads and validates application settings."""
    logger.info("Loading application settings...")
    try:
        settings_instance = Settings()
    except ValueError as val_err:
        logger.critical(f"CRITICAL ERROR in settings validation: {val_err}")
        raise SystemExit(f"Settings validation failed: {val_err}")

    env_files_found = [p for p in (find_dotenv_path(".env"), find_dotenv_path(".env.local")) if p]
    if env_files_found:
        logger.info(f"Loaded environment overrides from: {', '.join(env_files_found)}")
    logger.info("Settings loaded and validated successfully.")
    return settings_instance
