from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    PROJECT_NAME: str = "Campus Trust & Safety"
    API_V1_STR: str = "/api/v1"
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:8081"]
    LOG_LEVEL: str = "INFO"

    # Database
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "trustcore"
    DATABASE_URL: Optional[str] = None
    SQL_ECHO: bool = False

    @property
    def async_database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # JWT (tokens are issued by the auth service, we only verify them)
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Content classifier
    CLASSIFIER_URL: str = "http://localhost:54321/functions/v1/moderate-content"
    CLASSIFIER_API_KEY: Optional[str] = None
    CLASSIFIER_TIMEOUT_SECONDS: float = 10.0

    # Limits
    MAX_POST_LENGTH: int = 280
    MAX_COMMENT_LENGTH: int = 280
    REPORT_REASON_MAX_LENGTH: int = 500
    FEED_PAGE_MAX: int = 50

settings = Settings()
