import os
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):

    port: int = 8000
    environment: str = "development"
    api_prefix: str = "/api"

    postgres_user: str = os.getenv("POSTGRES_USER", "user")
    postgres_password: str = os.getenv("POSTGRES_PASSWORD", "password")
    postgres_db: str = os.getenv("POSTGRES_DB", "campus_portal")
    postgres_host: str = os.getenv("POSTGRES_HOST", "db")
    postgres_port: int = 5432

    # Full URL override, e.g. sqlite:///./campus.db for local runs
    sqlalchemy_database_uri: Optional[str] = None

    @property
    def database_url(self) -> str:
        if self.sqlalchemy_database_uri:
            return self.sqlalchemy_database_uri
        return f"postgresql://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    bcrypt_rounds: int = 12

    cookie_name: str = "token"
    cookie_secure: bool = False
    cookie_samesite: str = "lax"

    cors_origins_str: str = "http://localhost:3000,http://localhost:5173"

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    cache_default_ttl: int = 600

    celery_broker_url: str = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
    celery_result_backend: str = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/0")
    celery_task_always_eager: bool = False

    email_host: str = "smtp.gmail.com"
    email_port: int = 587
    email_user: Optional[str] = None
    email_pass: Optional[str] = None
    email_from: Optional[str] = None

    upload_base_dir: str = os.getenv("UPLOAD_BASE_DIR", "/app")
    max_upload_size: int = 5 * 1024 * 1024
    allowed_image_types_str: str = "image/jpeg,image/png,image/webp,image/gif"
    orphan_upload_grace_hours: int = 24

    @property
    def allowed_image_types(self) -> list[str]:
        return [t.strip() for t in self.allowed_image_types_str.split(",") if t.strip()]

    slow_request_threshold: float = 1.0
    rate_limit_enabled: bool = True
    auth_rate_limit_per_minute: int = 20

    auto_publish_results: bool = False
    max_notifications_per_user: int = 20

    default_timezone: str = "Asia/Kolkata"
    timezone_display_format: str = "%d.%m.%Y, %H:%M:%S"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
