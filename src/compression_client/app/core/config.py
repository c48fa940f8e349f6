from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


def get_project_root() -> Path:
    current_path = Path(__file__).parent
    while current_path != current_path.parent:
        if (current_path / "pyproject.toml").exists():
            return current_path
        current_path = current_path.parent
    return Path(".")


class Settings(BaseSettings):
    # Application Settings
    APP_NAME: str = Field(default="Image Compression Client")
    DEBUG: bool = Field(default=False)
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)

    # CORS Settings
    ALLOWED_ORIGINS: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"]
    )

    # Remote Services
    ANALYSIS_SERVICE_URL: str = Field(default="http://localhost:5000")
    COMPRESSION_SERVICE_URL: str = Field(default="http://localhost:5239")

    # Request Timeouts (seconds)
    ANALYSIS_TIMEOUT: float = Field(default=30.0)
    COMPRESSION_TIMEOUT: float = Field(default=120.0)
    DOWNLOAD_TIMEOUT: float = Field(default=60.0)

    # Download Settings
    DOWNLOAD_DIR: str = Field(default="./storage/downloads")
    DOWNLOAD_PREFIX: str = Field(default="compressed_")

    # Upload Settings
    MAX_FILE_SIZE: int = Field(default=100 * 1024 * 1024)  # 100MB

    # Default Compression Options
    DEFAULT_METHOD: str = Field(default="traditional")
    DEFAULT_QUALITY: int = Field(default=85)
    DEFAULT_ENABLE_ANALYSIS: bool = Field(default=True)

    # Logging Settings
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str = Field(default="./storage/logs/compression_client.log")

    model_config = {
        "env_file": get_project_root() / ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }

    @property
    def absolute_download_dir(self) -> str:
        """Get absolute path for downloads directory."""
        return str(get_project_root() / self.DOWNLOAD_DIR)

    @property
    def absolute_log_file(self) -> str:
        """Get absolute path for the log file."""
        return str(get_project_root() / self.LOG_FILE)


@lru_cache()
def get_settings() -> Settings:
    return Settings()
