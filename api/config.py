"""
Application configuration from environment variables
"""
from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Execution store (in-memory SQLite shared across worker threads by default)
    DATABASE_URL: str = "sqlite://"

    # LLM
    LLM_API_KEY: str = ""
    LLM_PROVIDER: str = "openrouter"
    LLM_MODEL: str = "google/gemini-flash-1.5"
    CONTEXT_WINDOW_SIZE: int = 8000

    # Directories
    PROJECT_DIR: str = str(Path.home() / ".report-pipeline" / "projects")
    PIPELINES_DIR: str = "./pipelines"
    CACHE_DIR: str = "./cache"
    PROMPTS_DIR: str = ""  # empty: bundled prompt library

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # Limits
    MAX_FILE_SIZE_MB: int = 100
    MAX_CONCURRENT_EXECUTIONS: int = 3

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def schema_cache_dir(self) -> str:
        return str(Path(self.CACHE_DIR) / "schemas")

    def ensure_directories(self):
        """Create required directories if they don't exist"""
        for dir_path in [self.CACHE_DIR, self.schema_cache_dir]:
            Path(dir_path).mkdir(parents=True, exist_ok=True)

        # File-backed SQLite needs its parent directory
        db_path = self.DATABASE_URL.replace("sqlite:///", "")
        if self.DATABASE_URL.startswith("sqlite:///") and db_path.startswith("./"):
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()
