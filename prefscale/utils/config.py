"""
Process configuration.

Settings are read from the environment once at startup (a .env file is
honoured through python-dotenv) and passed explicitly to every component.
The model is frozen; nothing mutates configuration after startup.
"""

import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ConfigError


class LoggingSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    format: str = "json"
    file_path: Optional[str] = None
    max_bytes: int = 10485760
    backup_count: int = 5


class CloudinarySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    cloud_name: Optional[str] = None
    api_key: Optional[str] = None
    api_secret: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)


class Settings(BaseModel):
    """Immutable application settings"""

    model_config = ConfigDict(frozen=True)

    jwt_secret: str = Field(..., min_length=1)
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None
    token_ttl_hours: int = Field(default=24, ge=1)
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    mongo_uri: Optional[str] = None
    mongo_db: str = "prefscale"
    data_dir: str = "data"

    cloudinary: CloudinarySettings = Field(default_factory=CloudinarySettings)
    blog_folder: str = "prefscale/blogs"

    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 5000

    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @property
    def admin_configured(self) -> bool:
        return bool(self.admin_email and self.admin_password)


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Build Settings from the environment. Raises ConfigError when JWT_SECRET is missing."""
    load_dotenv(env_file)

    jwt_secret = _env("JWT_SECRET")
    if not jwt_secret:
        raise ConfigError("JWT_SECRET is not set")

    cors = _env("CORS_ORIGINS", "*")
    return Settings(
        jwt_secret=jwt_secret,
        # Compared verbatim at login, so not stripped.
        admin_email=os.getenv("ADMIN_EMAIL") or None,
        admin_password=os.getenv("ADMIN_PASSWORD") or None,
        token_ttl_hours=_env_int("TOKEN_TTL_HOURS", 24),
        bcrypt_rounds=_env_int("BCRYPT_ROUNDS", 10),
        mongo_uri=_env("MONGO_URI"),
        mongo_db=_env("MONGO_DB", "prefscale"),
        data_dir=_env("DATA_DIR", "data"),
        cloudinary=CloudinarySettings(
            cloud_name=_env("CLOUDINARY_CLOUD_NAME"),
            api_key=_env("CLOUDINARY_API_KEY"),
            api_secret=_env("CLOUDINARY_API_SECRET"),
        ),
        blog_folder=_env("BLOG_FOLDER", "prefscale/blogs"),
        cors_origins=[origin.strip() for origin in cors.split(",") if origin.strip()],
        environment=_env("ENVIRONMENT", "development").lower(),
        host=_env("HOST", "0.0.0.0"),
        port=_env_int("PORT", 5000),
        logging=LoggingSettings(
            level=_env("LOG_LEVEL", "INFO").upper(),
            format=_env("LOG_FORMAT", "json").lower(),
            file_path=_env("LOG_FILE"),
            max_bytes=_env_int("LOG_MAX_BYTES", 10485760),
            backup_count=_env_int("LOG_BACKUP_COUNT", 5),
        ),
    )
