"""Application configuration settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "postgresql://localhost:5432/booktrade"

    # Redis (Celery broker + result backend)
    redis_url: str = "redis://localhost:6379/0"
    # Run tasks inline instead of queueing them (local development)
    celery_task_always_eager: bool = False

    # Environment
    environment: str = "development"

    # Blob storage root; book photos live under <target_folder>/books
    target_folder: str = "images"

    # Public domains used to build links (host[:port], no scheme)
    backend_domain: str = "localhost:3333"
    frontend_domain: str = "localhost:3000"

    # Shared secret of the upstream auth service (HS256)
    jwt_secret: str = "change-me"

    max_images_per_listing: int = 3

    # Administrator who reviews uploads and redeems activation codes
    admin_email: str = ""

    # Outbound mail
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_from_email: str = ""
    smtp_from_name: str = "BookTrade"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def books_folder(self) -> Path:
        return Path(self.target_folder) / "books"

    def backend_url(self, path: str) -> str:
        return f"http://{self.backend_domain}/{path.lstrip('/')}"

    def frontend_url(self, path: str) -> str:
        return f"http://{self.frontend_domain}/{path.lstrip('/')}"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
