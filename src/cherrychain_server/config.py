"""Configuration management using Pydantic settings."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "CherryChain"
    debug: bool = False

    # Server
    host: str = "127.0.0.1"
    port: int = 3000

    # World mode: "shared" (one global world) or "isolated" (one per connection)
    world_mode: Literal["shared", "isolated"] = "shared"

    # Observer loop cadence
    tick_rate_hz: float = Field(10.0, gt=0)      # engine ticks per real second
    broadcast_rate_hz: float = Field(1.0, gt=0)  # snapshots pushed per real second
    tick_delta: float = Field(0.1, gt=0)         # simulated seconds per tick
    outbox_size: int = Field(100, gt=0)          # queued messages before a client is dropped

    # Route (default Chile -> China)
    route_start_lat: float = -33.0
    route_start_lon: float = -71.0
    route_end_lat: float = 31.0
    route_end_lon: float = 121.0
    journey_days: float = 30.0

    # Seed container spawned into every new world at the route start
    seed_container: bool = True
    seed_target_temp: float = 0.0

    # Quality alerts (percent); set to 0 to disable
    quality_alert_threshold: float = 90.0


settings = Settings()
