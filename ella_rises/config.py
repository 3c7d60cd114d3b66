from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    DB_PATH: Path = Path.home() / "ella_rises.db"
    # Seconds a writer waits on a locked SQLite database before giving up
    DB_BUSY_TIMEOUT: float = 30.0

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 3000

    LOG_LEVEL: str = "INFO"
    LOG_DIR: Path = Path(__file__).resolve().parent / "logs"

    # Value of the ``level`` query parameter that marks a manager
    MANAGER_LEVEL: str = "M"

    @property
    def async_db_url(self) -> str:
        return f"sqlite+aiosqlite:///{self.DB_PATH}"

    @property
    def sync_db_url(self) -> str:
        return f"sqlite:///{self.DB_PATH}"


settings = Settings()
