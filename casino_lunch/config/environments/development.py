from ..settings import Settings


class DevelopmentSettings(Settings):
    debug: bool = True
    log_level: str = "DEBUG"
    database_url: str = "duckdb://./casino_lunch/data/casino_lunch_dev.duckdb"
