"""
BarcodeLookupAgent Configuration
================================

This module handles configuration loading for the barcode agent.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    BARCODE_STREAM_URL        -> stream.url
    BARCODE_DETECTOR_BACKEND  -> detector.backend
    BARCODE_CATALOG_URL       -> catalog.base_url
    BARCODE_CATALOG_TIMEOUT   -> catalog.timeout_seconds
    BARCODE_DATA_DIR          -> storage.data_dir
    BARCODE_EXPORT_DIR        -> export.directory
    BARCODE_AGENT_PORT        -> server.port
    BARCODE_LOG_LEVEL         -> logging.level
    PORT                      -> server.port (Cloud Run)

Example:
    from barcode_agent.config import settings

    print(settings.catalog.base_url)
    print(settings.storage.ledger_path)
"""

import os
import logging
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class AgentConfig(BaseModel):
    """Agent identification configuration."""

    name: str = Field(default="barcode-lookup-agent", description="Agent name")
    version: str = Field(default="v0.1.0", description="Service version")


class StreamConfig(BaseModel):
    """Frame stream connection configuration."""

    url: str = Field(
        default="ws://localhost:8000/ws/frames",
        description="WebSocket URL of the frame source",
    )
    reconnect_backoff_ms: int = Field(
        default=500,
        ge=100,
        description="Backoff in milliseconds between reconnect attempts",
    )


class MockDetectorConfig(BaseModel):
    """Mock detector backend configuration."""

    values: List[str] = Field(
        default_factory=lambda: ["5000112637922"],
        description="Raw values reported for every frame",
    )


class DetectorConfig(BaseModel):
    """Barcode detector backend configuration."""

    backend: str = Field(
        default="pyzbar",
        description="Detector backend: 'pyzbar' or 'mock'",
    )
    mock: MockDetectorConfig = Field(default_factory=MockDetectorConfig)


class CatalogConfig(BaseModel):
    """Open Food Facts catalog configuration."""

    base_url: str = Field(
        default="https://world.openfoodfacts.org",
        description="Catalog service root URL",
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Total request timeout for a single lookup",
    )
    user_agent: str = Field(
        default="BarcodeLookupAgent/0.1",
        description="User-Agent sent with catalog requests",
    )


class StorageConfig(BaseModel):
    """Ledger and product store locations."""

    data_dir: str = Field(default="./data", description="Directory for stored files")
    ledger_filename: str = Field(default="api_responses.json")
    products_filename: str = Field(default="products.json")

    @property
    def ledger_path(self) -> Path:
        return Path(self.data_dir) / self.ledger_filename

    @property
    def products_path(self) -> Path:
        return Path(self.data_dir) / self.products_filename


class ExportConfig(BaseModel):
    """File export configuration."""

    directory: str = Field(
        default="~/Downloads",
        description="Public directory that exported files are copied to",
    )


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8002, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for BarcodeLookupAgent.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    agent: AgentConfig = Field(default_factory=AgentConfig)
    stream: StreamConfig = Field(default_factory=StreamConfig)
    detector: DetectorConfig = Field(default_factory=DetectorConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path("/app/config.yaml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.warning("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    if env_url := os.environ.get("BARCODE_STREAM_URL"):
        config_data.setdefault("stream", {})["url"] = env_url

    if env_backend := os.environ.get("BARCODE_DETECTOR_BACKEND"):
        config_data.setdefault("detector", {})["backend"] = env_backend

    if env_catalog := os.environ.get("BARCODE_CATALOG_URL"):
        config_data.setdefault("catalog", {})["base_url"] = env_catalog
    if env_timeout := os.environ.get("BARCODE_CATALOG_TIMEOUT"):
        config_data.setdefault("catalog", {})["timeout_seconds"] = float(env_timeout)

    if env_data := os.environ.get("BARCODE_DATA_DIR"):
        config_data.setdefault("storage", {})["data_dir"] = env_data
    if env_export := os.environ.get("BARCODE_EXPORT_DIR"):
        config_data.setdefault("export", {})["directory"] = env_export

    # Cloud Run uses PORT env var
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    elif env_port := os.environ.get("BARCODE_AGENT_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)

    if env_log := os.environ.get("BARCODE_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
setup_logging(settings)
