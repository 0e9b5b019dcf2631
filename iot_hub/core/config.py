from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="HUB_", extra="ignore")

    app_name: str = "IoT Sensor Hub"
    timezone: str = "UTC"

    # Sampling
    sample_seconds: float = Field(default=2.0, gt=0)
    history_capacity: int = Field(default=100, ge=1)

    # Upper bound on a single sensor read / observer delivery
    sample_timeout_seconds: float = Field(default=1.0, gt=0)
    send_timeout_seconds: float = Field(default=1.0, gt=0)

    # Transport
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"
    log_file: str | None = "iot_hub.log"


settings = Settings()
