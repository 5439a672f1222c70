"""
Centralized configuration using Pydantic BaseSettings.
All environment variables are loaded here - no hardcoded values.
"""
from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Mood Movie Recommender"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Text generation (Gemini)
    GEMINI_API_KEY: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_GENAI_API_KEY"),
    )
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_TIMEOUT_MS: Optional[int] = None  # No client-side deadline by default

    # Recommendation prompt
    MIN_RECOMMENDATIONS: int = 3
    MAX_RECOMMENDATIONS: int = 5
    MOOD_MAX_LENGTH: int = 500

    # Feature Flags
    PERSONALIZATION_ENABLED: bool = True

    # Identity ("firebase" | "none")
    IDENTITY_PROVIDER: str = "firebase"
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None

    # Search history ("memory" | "firestore")
    HISTORY_BACKEND: str = "memory"
    HISTORY_LIMIT: int = 10
    FIRESTORE_COLLECTION: str = "searches"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Telemetry
    ENABLE_OTEL: bool = False  # Default to False to prevent gRPC errors in dev
    ENABLE_PROMETHEUS: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True
        populate_by_name = True


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance - singleton pattern."""
    return Settings()
