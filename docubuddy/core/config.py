"""
Application Configuration - Environment settings and constants.

Loads configuration from environment variables with sensible defaults.
Uses Pydantic Settings for validation and type safety.
"""

from typing import List, Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Usage:
        from docubuddy.core.config import get_settings
        settings = get_settings()
    """

    # Application
    app_name: str = "Docu Buddy"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # HTTP Server Configuration
    server_host: str = "0.0.0.0"
    server_port: int = 8000
    api_prefix: str = "/api/v1"
    allowed_origins: List[str] = ["*"]

    # LLM Configuration (OpenAI-compatible API)
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    llm_timeout_seconds: float = 60.0
    question_model: str = "gpt-4o-mini"
    answer_model: str = "gpt-4o"
    documentation_model: str = "gpt-4"
    chat_model: str = "gpt-4"

    # GitHub Configuration
    github_api_url: str = "https://api.github.com"
    github_token: Optional[str] = None
    github_timeout_seconds: float = 30.0
    github_user_agent: str = "DocuBuddy-CodeAnalyzer/1.0"

    # Persistence
    database_path: str = "./data/docubuddy.db"

    # Knowledge Index Configuration
    embedding_model: str = "all-MiniLM-L6-v2"
    embedding_dimension: int = 384
    embedding_device: str = "cpu"  # "cpu", "cuda", or "mps"
    vector_store_backend: str = "chroma"  # chroma or memory
    vector_store_path: str = "./data/vector_db"
    vector_store_collection: str = "documents"

    # Analysis pipeline
    generate_architecture_docs: bool = True
    index_knowledge: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
