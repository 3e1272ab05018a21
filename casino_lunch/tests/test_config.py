from ..app import create_app
from ..config import Settings, get_settings, settings
from ..config.environments import DevelopmentSettings
from ..core.database import MEMORY_PATH, path_from_url


class TestSettingsSelection:
    """Environment specific settings"""

    def test_environment_lookup(self):
        assert isinstance(get_settings("development"), DevelopmentSettings)
        assert get_settings("testing").database_url == "duckdb://:memory:"

    def test_unknown_environment_falls_back(self, monkeypatch):
        monkeypatch.delenv("CASINO_ENV", raising=False)
        assert get_settings("staging") is settings
        assert get_settings() is settings

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("CASINO_JWT_EXPIRE_HOURS", "2")
        assert Settings().jwt_expire_hours == 2

    def test_database_url(self):
        assert path_from_url("duckdb://:memory:") == MEMORY_PATH
        assert path_from_url("duckdb://./data/x.duckdb") == "./data/x.duckdb"

    def test_app_uses_settings_database(self, test_settings):
        app = create_app(test_settings)
        assert app.state.db.db_path == MEMORY_PATH
