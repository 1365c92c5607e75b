import os
from datetime import timedelta


def normalize_database_url(raw_url: str) -> str:
    if raw_url.startswith("postgres://"):
        return raw_url.replace("postgres://", "postgresql://", 1)
    return raw_url


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-unsafe-key")
    SQLALCHEMY_DATABASE_URI = normalize_database_url(
        os.getenv("DATABASE_URL", "sqlite:///instance/campusconnect.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": 300,
    }
    CACHE_TYPE = os.getenv("CACHE_TYPE", "SimpleCache")
    CACHE_DEFAULT_TIMEOUT = int(os.getenv("CACHE_DEFAULT_TIMEOUT", "120"))
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "500 per day;120 per hour")

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"
    PERMANENT_SESSION_LIFETIME = timedelta(days=int(os.getenv("SESSION_DAYS", "7")))
    REMEMBER_COOKIE_HTTPONLY = True

    MAX_RESOURCE_MB = int(os.getenv("MAX_RESOURCE_MB", "50"))
    MAX_PROFILE_PICTURE_MB = int(os.getenv("MAX_PROFILE_PICTURE_MB", "5"))
    # Multipart bodies carry a little overhead on top of the file itself.
    MAX_CONTENT_LENGTH = (MAX_RESOURCE_MB + 1) * 1024 * 1024
    UPLOAD_DIR = os.getenv("UPLOAD_DIR", "static/uploads")
    MEDIA_BASE_URL = os.getenv("MEDIA_BASE_URL", "/static/uploads")
    MEDIA_FOLDER = os.getenv("MEDIA_FOLDER", "campusconnect")

    RESOURCE_AUTO_APPROVE = os.getenv("RESOURCE_AUTO_APPROVE", "true").lower() == "true"
    DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "20"))
    MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))
    ACHIEVEMENT_CACHE_TIMEOUT = int(os.getenv("ACHIEVEMENT_CACHE_TIMEOUT", "300"))

    SENTRY_DSN = os.getenv("SENTRY_DSN")


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SESSION_COOKIE_SECURE = False


class ProductionConfig(BaseConfig):
    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = True


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    RATELIMIT_ENABLED = False
    CACHE_TYPE = "NullCache"
    SENTRY_DSN = None


config_by_env = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
