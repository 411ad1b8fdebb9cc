from pydantic_settings import BaseSettings
from functools import lru_cache
import os


class Settings(BaseSettings):
    app_name: str = "Resume Parsing API"
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    log_level: str = "INFO"

    # Database - parse job log (SQLite locally, PostgreSQL in production)
    database_url: str = "sqlite+aiosqlite:///./resume_parser.db"

    # CORS - comma-separated list of allowed origins
    cors_origins: str = "*"

    # LLM provider selection: "auto", "gemini" or "openai"
    llm_provider: str = "auto"

    # Gemini
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    gemini_file_poll_interval_seconds: float = 1.0
    gemini_file_poll_timeout_seconds: float = 30.0

    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"            # multimodal (PDF upload) path
    openai_text_model: str = "gpt-4o-mini"  # extracted text path

    # Pipeline behaviour
    analysis_mode: str = "auto"  # "auto" sends detected PDFs as files, "text" always sends text
    use_library_extractors: bool = True
    max_text_chars: int = 12000
    min_content_length: int = 50
    max_document_bytes: int = 10 * 1024 * 1024  # 10MB
    cleanup_uploaded_files: bool = True

    # Timeouts
    download_timeout_seconds: float = 60.0
    llm_timeout_seconds: float = 120.0

    class Config:
        env_file = ".env"
        extra = "ignore"
        # Make field names case-insensitive for environment variables
        case_sensitive = False

    def get_cors_origins(self) -> list:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
