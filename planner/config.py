"""
Roadmap Planner
Configuration classes for Flask App Factory.

Usage:
    config_name = os.getenv("APP_ENV", "development")
    app.config.from_object(config[config_name])
"""

import os

basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))

# Default SQLite file for the desktop shell when no explicit URL is given
_SQLITE_DEV = f"sqlite:///{os.path.join(basedir, 'instance', 'roadmap.db')}"
_SQLITE_TEST = "sqlite:///:memory:"

# Logical name the record store looks its engine up by
DEFAULT_CONNECTION_NAME = "sqlite:roadmap.db"


class Config:
    """Base configuration shared across all environments."""

    DEBUG = False
    TESTING = False

    ROADMAP_CONNECTION_NAME = os.getenv("ROADMAP_CONNECTION_NAME", DEFAULT_CONNECTION_NAME)

    # SQLAlchemy
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": 300,   # recycle connections every 5 min
    }

    # CORS (the desktop shell's webview origin)
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    MAX_CONTENT_LENGTH = 1 * 1024 * 1024  # 1 MB


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.getenv("ROADMAP_DATABASE_URL", "") or _SQLITE_DEV


class TestingConfig(Config):
    """Testing environment configuration."""

    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", _SQLITE_TEST)


class ProductionConfig(Config):
    """Production (packaged desktop build) configuration."""

    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("ROADMAP_DATABASE_URL")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")  # Must be set explicitly in production

    def __init__(self):
        if not self.SQLALCHEMY_DATABASE_URI:
            raise RuntimeError("ROADMAP_DATABASE_URL environment variable is required in production")


# Configuration mapping: environment name -> config class
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}
