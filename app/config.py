from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "postgresql+asyncpg://localhost:5432/sales_kpi"
    default_tz: str = "UTC"  # Calendar used for "today" when reading/writing entries
    kpi_api_key: str | None = None

    # Trend windows
    activity_trend_days: int = 7  # Trailing daily-activity window, inclusive of today
    pipeline_trend_weeks: int = 4  # Monday-aligned pipeline buckets

    export_filename: str = "sales-kpi-data.json"
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
