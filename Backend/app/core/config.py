from pydantic_settings import BaseSettings
from pathlib import Path


class Settings(BaseSettings):
    """
    Application Configuration Settings.
    This class defines the configuration variables used throughout the application.
    Values are loaded from environment variables or a .env file.
    """

    # Port the HTTP server listens on.
    PORT: int = 3000

    # Interface to bind. "0.0.0.0" makes the player reachable from other devices on the network.
    HOST: str = "0.0.0.0"

    # Directory holding the bundled front-end build (must contain index.html).
    CLIENT_BUILD_PATH: Path = Path(__file__).resolve().parent.parent / "static"

    # Extra directories that may be browsed besides the working directory and drive roots.
    ALLOWED_ROOTS: list[Path] = []

    # Size of each chunk read from disk while streaming a video.
    CHUNK_SIZE: int = 64 * 1024

    LOG_LEVEL: str = "INFO"

    # Origins allowed to call the API from a browser.
    CORS_ORIGINS: list[str] = ["*"]

    class Config:
        """
        Pydantic configuration class.
        """
        # Instruct Pydantic to load settings from a file named ".env"
        env_file = ".env"


# Create a globally accessible settings instance
settings = Settings()
