from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    # Application settings
    app_name: str = "Content Engine"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # Database settings
    database_url: str = "sqlite+aiosqlite:///./content_engine.db"

    # Front-end links used in previews and notifications
    web_base_url: str = "http://localhost:3030"
    cms_base_url: str = "http://localhost:3001"
    preview_base_url: str = "http://localhost:3000"
    preview_ttl_minutes: int = 120

    # Approval notifications
    approval_email_category: str = "Approve"
    default_author_email: str = ""
    notification_queue_size: int = 100
    notification_workers: int = 2

    # SMTP settings
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_from: str = "noreply@example.com"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


settings = Settings()
