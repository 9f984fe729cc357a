from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path

PACKAGE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """SafeDrive settings; every field can be set from the environment or .env"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "SafeDrive Dashboard"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"  # development | testing | production
    DEBUG: bool = True
    SECRET_KEY: str
    API_VERSION: str = "v1"
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database (postgresql:// is switched to asyncpg)
    # ==========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./safedrive.db"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # ==========================================
    # Sessions
    # ==========================================
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # cookie Max-Age follows this
    BCRYPT_ROUNDS: int = 12
    AUTH_COOKIE_NAME: str = "auth-token"
    AUTH_COOKIE_SECURE: bool = False  # always on in production

    # Comma-separated
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://localhost:8000"

    # ==========================================
    # Limits
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    MAX_REQUEST_SIZE: int = 1024 * 1024

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/safedrive.log"  # empty string disables the file handler

    # ==========================================
    # Monitoring
    # ==========================================
    DEFAULT_ORGANIZATION_ID: str = "org_default"
    DETECTION_IMAGE_BASE_URL: str = "http://localhost:5000"
    ALERT_DUPLICATE_WINDOW_MINUTES: int = 60
    NOTIFICATION_RETENTION_DAYS: int = 7
    NOTIFICATION_SYNC_HOURS: int = 24
    DRIVER_ID_MAX_ATTEMPTS: int = 100

    # ==========================================
    # Windowed tables
    # ==========================================
    TABLE_ROW_HEIGHT: int = 48  # px
    TABLE_VISIBLE_ROWS: int = 10

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS_STR.split(",") if origin.strip()]

    @property
    def BASE_DIR(self) -> Path:
        """Directory of the safedrive package"""
        return PACKAGE_DIR

    @property
    def TEMPLATES_DIR(self) -> Path:
        return PACKAGE_DIR / "templates"

    @property
    def STATIC_DIR(self) -> Path:
        return PACKAGE_DIR / "static"

    @property
    def auth_cookie_secure(self) -> bool:
        return self.AUTH_COOKIE_SECURE or self.ENVIRONMENT == "production"

    def is_dev_mode(self) -> bool:
        return self.ENVIRONMENT == "development" or self.DEBUG


settings = Settings()
