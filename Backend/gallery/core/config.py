from pydantic_settings import BaseSettings
from pathlib import Path


class Settings(BaseSettings):
    """
    Application Configuration Settings.
    Values are loaded from environment variables or a .env file.
    """

    # Network address the server listens on.
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # The flat directory where uploaded memories are stored.
    MEDIA_ROOT_PATH: Path = Path("./anhkiniem")

    # Directory served for unmatched GET requests, and the single-page entry point.
    STATIC_ROOT: Path = Path(".")
    INDEX_PAGE: Path = Path("./index.html")

    # Largest accepted upload (20 MiB).
    MAX_UPLOAD_BYTES: int = 20 * 1024 * 1024

    # Comma separated list of allowed origins.
    CORS_ORIGINS: str = "*"

    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    class Config:
        """
        Pydantic configuration class.
        """
        env_file = ".env"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


# Default settings instance used by the ASGI entry point
settings = Settings()
