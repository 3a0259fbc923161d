from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # API Settings
    api_title: str = "PDF Recolor Service"
    api_version: str = "1.0.0"
    api_description: str = "FastAPI service for inverting or remapping the colors of PDF pages"

    # File Settings
    max_file_size: int = 100 * 1024 * 1024  # 100MB
    allowed_file_types: list = [".pdf"]  # compared case-insensitively

    # Processing Settings
    default_mode: str = "invert"
    default_content_color: str = "#ffffff"
    default_background_color: str = "#000000"
    compress_content_streams: bool = True
    preview_dpi: int = 72

    # Job Settings
    max_jobs: int = 50  # oldest finished jobs are evicted beyond this

    # CORS Settings
    cors_origins: list = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list = ["*"]
    cors_allow_headers: list = ["*"]

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
