from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    # Database
    database_url: str = "duckdb://./casino_lunch/data/casino_lunch.duckdb"

    # JWT
    jwt_secret_key: str = "your-secret-key"
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24 * 7  # 7 days

    # API
    api_title: str = "Casino Lunch API"
    api_version: str = "1.0.0"
    api_prefix: str = "/api/v1"

    # Logging
    log_level: str = "INFO"

    # Demo test user for the one-click login
    test_user_email: str = "test@usm.cl"
    test_user_password: str = "123456"
    test_user_full_name: str = "Usuario de Prueba"
    test_user_employee_id: str = "TEST001"
    test_user_department: Optional[str] = "Informática"
    test_user_role: str = "tester"

    # Development mode
    debug: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CASINO_",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
