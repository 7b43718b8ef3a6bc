"""Tests for environment-backed settings"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from prefscale.utils.config import load_settings
from prefscale.utils.exceptions import ConfigError

BASE_ENV = {"JWT_SECRET": "s" * 40}


def load(env, tmp_path):
    # Point dotenv at an empty file so a developer's .env cannot leak in.
    env_file = tmp_path / ".env"
    env_file.write_text("", encoding="utf-8")
    with patch.dict(os.environ, env, clear=True):
        return load_settings(str(env_file))


def test_defaults(tmp_path):
    settings = load(BASE_ENV, tmp_path)
    assert settings.token_ttl_hours == 24
    assert settings.bcrypt_rounds == 10
    assert settings.mongo_uri is None
    assert settings.cors_origins == ["*"]
    assert settings.blog_folder == "prefscale/blogs"
    assert not settings.admin_configured
    assert not settings.cloudinary.is_configured


def test_missing_secret_fails_fast(tmp_path):
    with pytest.raises(ConfigError):
        load({}, tmp_path)


def test_overrides(tmp_path):
    env = dict(
        BASE_ENV,
        ADMIN_EMAIL="boss@prefscale.com",
        ADMIN_PASSWORD="hunter2",
        TOKEN_TTL_HOURS="1",
        CORS_ORIGINS="https://a.com, https://b.com",
        CLOUDINARY_CLOUD_NAME="demo",
        CLOUDINARY_API_KEY="key",
        CLOUDINARY_API_SECRET="secret",
        LOG_FORMAT="TEXT",
    )
    settings = load(env, tmp_path)
    assert settings.admin_configured
    assert settings.token_ttl_hours == 1
    assert settings.cors_origins == ["https://a.com", "https://b.com"]
    assert settings.cloudinary.is_configured
    assert settings.logging.format == "text"


def test_bad_integer(tmp_path):
    with pytest.raises(ConfigError):
        load(dict(BASE_ENV, TOKEN_TTL_HOURS="one day"), tmp_path)


def test_settings_are_frozen(tmp_path):
    settings = load(BASE_ENV, tmp_path)
    with pytest.raises(ValidationError):
        settings.jwt_secret = "changed"
