"""Application configuration loaded from the environment."""

import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class AppConfig:
    """Application-wide configuration."""

    # Database (finished-game rankings)
    database_url: str

    # Flask
    flask_secret_key: str
    flask_debug: bool
    flask_port: int

    # Logging
    log_level: str = "INFO"
    log_to_file: bool = False
    log_dir: str = "logs"

    @classmethod
    def load(cls) -> "AppConfig":
        """Load configuration from environment variables."""
        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///./tulip_trader.db"),
            flask_secret_key=os.getenv("FLASK_SECRET_KEY", "dev-secret-key"),
            flask_debug=_env_bool("FLASK_DEBUG", "False"),
            flask_port=int(os.getenv("FLASK_PORT", "5000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_to_file=_env_bool("LOG_TO_FILE", "False"),
            log_dir=os.getenv("LOG_DIR", "logs"),
        )


# Global configuration instance
config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global config
    if config is None:
        config = AppConfig.load()
    return config


def reset_config() -> None:
    """Drop the cached configuration so the next call re-reads the environment."""
    global config
    config = None
