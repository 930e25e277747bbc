from pydantic_settings import BaseSettings
from typing import List

from eventcheckin.core.env_config import cors_origins_for


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./eventcheckin.db"
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    ENVIRONMENT: str = "development"
    FRONTEND_URL: str = "http://localhost:8080"

    # CORS origins - derived from the frontend URL when left empty
    CORS_ORIGINS: List[str] = []

    # Scannable image rendering
    QR_BOX_SIZE: int = 10
    QR_BORDER: int = 1
    QR_ERROR_CORRECTION: str = "M"

    # Seeded on first start
    DEFAULT_ADMIN_EMAIL: str = "admin@example.org"
    DEFAULT_ADMIN_PASSWORD: str = "admin!123"

    class Config:
        env_file = ".env"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        if not self.CORS_ORIGINS:
            self.CORS_ORIGINS = cors_origins_for(self.FRONTEND_URL)

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


settings = Settings()
