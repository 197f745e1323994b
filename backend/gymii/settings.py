from functools import lru_cache
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    ENV: str = "local"
    DB_HOST: str = "db"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_NAME: str = "gymii"
    DB_URL: str | None = None  # full URL override, e.g. sqlite for tests

    # Auth
    SECRET_KEY: str = "dev-secret-change-me"       # set a strong one in prod
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Workout sessions
    SNAPSHOT_DIR: str = "~/.gymii/sessions"
    SESSION_RESUME_MAX_AGE_HOURS: float = 12
    SESSION_TICK_SECONDS: float = 1.0

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def DATABASE_URL(self) -> str:
        if self.DB_URL:
            return self.DB_URL
        return (
            f"postgresql+psycopg://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def snapshot_path(self) -> Path:
        return Path(self.SNAPSHOT_DIR).expanduser()

@lru_cache
def get_settings() -> Settings:
    return Settings()
