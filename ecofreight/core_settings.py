from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    POSTGRES_HOST: str = "postgres"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "ecofreight"
    POSTGRES_USER: str = "ecofreight"
    POSTGRES_PASSWORD: str = "ecofreight"
    # Full SQLAlchemy URL; takes precedence over the POSTGRES_* parts (e.g. sqlite:// in tests)
    DATABASE_URL: Optional[str] = None

    JWT_SECRET: str = "change-me"
    JWT_ALG: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    REDIS_URL: Optional[str] = None
    CACHE_TTL_SECONDS: int = 60

    # Distance assumed for footprint estimates until a real distance service exists
    DEFAULT_DISTANCE_KM: float = 500.0

    LOG_LEVEL: str = "INFO"
    RUN_MIGRATIONS: bool = True

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

@lru_cache
def get_settings() -> Settings:
    return Settings()
