import os
from functools import lru_cache


class Settings:
    """Production settings; everything secret or host specific comes from the environment."""

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./taskrights.sqlite")
    SECRET_KEY = os.getenv("SECRET_KEY", "SUPER_SECRET_KEY_CHANGE_IN_PRODUCTION")
    ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

    APP_NAME = "Task Rights API"
    APP_VERSION = "1.0.0"
    DEBUG = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

    # Page size for share listings
    MAX_ITEMS_PER_PAGE = int(os.getenv("MAX_ITEMS_PER_PAGE", "50"))


class DevSettings(Settings):
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./taskrights_dev.sqlite")
    DEBUG = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class TestSettings(Settings):
    # tests bind their own engine; tokens are signed with a fixed key
    DATABASE_URL = "sqlite:///:memory:"
    SECRET_KEY = "test-secret-key"
    ALGORITHM = "HS256"
    LOG_LEVEL = "DEBUG"
    MAX_ITEMS_PER_PAGE = 50


@lru_cache
def get_settings():
    env = os.getenv("ENV", "dev")
    if env == "test":
        return TestSettings()
    if env == "dev":
        return DevSettings()
    return Settings()
