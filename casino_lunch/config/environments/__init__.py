from .development import DevelopmentSettings
from .testing import TestingSettings

__all__ = ["DevelopmentSettings", "TestingSettings"]
