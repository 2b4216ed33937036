"""
Prospect Resolution Engine - Configuration

Every matching, merging and bulk-job threshold can be overridden from the
environment or a .env file.
"""

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# Load .env file
load_dotenv()

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = Field(
        default=f"sqlite:///{PROJECT_ROOT}/data/prospects.db"
    )

    @property
    def project_root(self) -> Path:
        """Return project root directory."""
        return PROJECT_ROOT

    # Application
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")
    LOG_TO_FILE: bool = Field(default=True)

    # Similarity thresholds (0-1)
    FUZZY_MATCH_THRESHOLD: float = Field(default=0.7)
    FUZZY_NAME_THRESHOLD: float = Field(default=0.85)
    PARTIAL_NAME_THRESHOLD: float = Field(default=0.70)
    WEBSITE_SIMILARITY_THRESHOLD: float = Field(default=0.8)

    # Template resolution
    HIGH_CONFIDENCE_SCORE: float = Field(default=30.0)
    MIN_TEMPLATE_FIELDS: int = Field(default=2)
    CANDIDATE_LIMIT: int = Field(default=100)
    TOP_MATCHES: int = Field(default=10)

    # Bulk operations
    BATCH_SIZE: int = Field(default=50)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
