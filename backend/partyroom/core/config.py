"""
Application configuration
"""

from typing import List
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings"""

    # Basics
    APP_NAME: str = "Party Room"
    VERSION: str = "1.0.0"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8001
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Database
    DATABASE_URL: str = "sqlite:///./partyroom.db"

    # Join links
    PUBLIC_BASE_URL: str = "http://localhost:5173"  # origin players open on their phones
    QR_SERVICE_URL: str = "https://api.qrserver.com/v1/create-qr-code/"
    QR_SIZE: int = 300
    QR_TIMEOUT: int = 10

    # Sessions
    DEFAULT_LANGUAGE: str = "fa"
    DEFAULT_MAX_PLAYERS: int = 12
    MIN_PLAYERS: int = 2
    MAX_PLAYERS_LIMIT: int = 12
    MIN_PLAYERS_TO_START: int = 2
    SESSION_TTL_HOURS: int = 24
    ENFORCE_HOST_TOKEN: bool = False  # off: any caller may issue host-only writes

    # Players
    NICKNAME_MAX_LENGTH: int = 20
    BANNED_WORDS: List[str] = ["placeholder"]
    BAD_WORD_MASK: str = "***"
    HEARTBEAT_INTERVAL: float = 5  # seconds between last_seen writes
    RECONNECT_WINDOW: int = 60  # seconds a last_seen stays fresh

    # Games
    NAME_GAME_ROUND_SECONDS: int = 60

    # Network probe
    NETWORK_PROBE_URL: str = "https://www.google.com/favicon.ico"
    NETWORK_PROBE_TIMEOUT: int = 5

    class Config:
        env_file = ".env"
        case_sensitive = True

# Global settings instance
settings = Settings()
