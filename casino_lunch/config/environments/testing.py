from ..settings import Settings


class TestingSettings(Settings):
    debug: bool = True
    database_url: str = "duckdb://:memory:"
    jwt_secret_key: str = "test-secret-key"
    api_title: str = "Casino Lunch API (Test)"
    api_version: str = "1.0.0-test"
