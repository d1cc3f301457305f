"""Configuration and settings"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables"""

    # OpenAI API
    openai_api_key: str = Field(default="")
    openai_text_model: str = Field(default="gpt-4o-mini")
    openai_image_model: str = Field(default="gpt-image-1")
    openai_timeout_seconds: float = Field(default=90.0)

    # Image generation
    image_count: int = Field(default=8, ge=3, le=8)
    image_generation_mode: str = Field(default="sequential", pattern="^(sequential|parallel)$")
    image_max_attempts: int = Field(default=2, ge=1)
    image_retry_delay: float = Field(default=3.0, ge=0.0)
    image_throttle_delay: float = Field(default=1.5, ge=0.0)

    # Google Cloud Storage
    gcp_service_account_json: str = Field(default="")
    gcs_bucket_name: str = Field(default="")
    gcs_signed_url_minutes: int = Field(default=15, ge=1)
    upload_mode: str = Field(default="sequential", pattern="^(sequential|parallel)$")

    # Vercel
    vercel_token: str = Field(default="")
    vercel_project_name: str = Field(default="")
    vercel_team_id: str = Field(default="")
    deploy_timeout_seconds: float = Field(default=120.0, gt=0.0)

    # Payment link surfaced after a successful deployment
    stripe_payment_link: str = Field(default="")

    # Rendering
    html_escape_content: bool = Field(default=True)

    # Frontend
    frontend_url: str = Field(default="http://localhost:5173")

    # API authentication (disabled when empty)
    api_key: str = Field(default="")

    # Logging
    log_level: str = Field(default="INFO")

    # API Configuration
    api_title: str = "ShopSite API"
    api_version: str = "0.1.0"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


# Global settings instance
settings = Settings()
