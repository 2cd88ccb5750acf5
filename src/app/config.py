"""Configuration management using Pydantic settings."""

from pathlib import Path

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
    app_name: str = "Toronto Attractions API"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = ["*"]

    # Catalogue document
    geojson_path: Path = Path("./tourist.geojson")
    default_collection_name: str = "Places of Interest and Attractions - 4326"
    default_crs_name: str = "urn:ogc:def:crs:OGC:1.3:CRS84"

    # One writer at a time per process; False restores last-save-wins
    serialize_writes: bool = True

    # Proximity search
    default_radius_km: float = 5.0
    km_per_degree: float = 111.0


settings = Settings()
