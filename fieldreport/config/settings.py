from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "fieldreport"
    db_username: str = "fieldreport"
    db_password: str = "secret"
    db_pool_max_size: int = Field(default=10, ge=1)

    deep_link_base_url: str = "http://localhost:3000"
    reports_dir: str = "storage/reports"

    watermark_template_path: str = "storage/watermark/base.png"
    watermark_logo_path: str = "storage/watermark/logo.png"
    watermark_domain: str = "www.sweepin.itb.ac.id"
    font_path: str = ""
    font_size: int = Field(default=20, gt=0)
    qr_size: int = Field(default=315, gt=0)
    description_wrap_step: int = Field(default=20, gt=0)
    description_wrap_width: int = Field(default=24, gt=0)
    stamp_timezone: str = ""

    canonical_width: int = Field(default=2000, gt=0)
    canonical_height: int = Field(default=2667, gt=0)
    imaging_backend: str = "pillow"

    max_concurrent_photos: int = Field(default=4, ge=1)
    photo_failure_policy: Literal["abort", "partial"] = "abort"
    max_description_length: int = Field(default=1000, ge=0)
    incomplete_report_timeout_minutes: int = Field(default=30, ge=1)
