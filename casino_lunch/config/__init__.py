import os

from .settings import settings, Settings
from .environments import DevelopmentSettings, TestingSettings

ENVIRONMENTS = {
    "development": DevelopmentSettings,
    "testing": TestingSettings,
}


def get_settings(environment: str = None) -> Settings:
    """Settings for CASINO_ENV (development / testing), the base settings otherwise"""
    environment = environment or os.environ.get("CASINO_ENV", "")
    settings_class = ENVIRONMENTS.get(environment.lower())
    return settings_class() if settings_class else settings


__all__ = ["settings", "Settings", "get_settings"]
