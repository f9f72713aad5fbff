"""
Configuration management for Crieur.

Hybrid configuration system using YAML files and environment variables.
Priority: Environment variables > YAML config > Pydantic defaults
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Crieur configuration schema.

    Loads configuration from:
    1. Environment variables (highest priority)
    2. YAML configuration files
    3. Pydantic defaults (lowest priority)

    Configuration files:
        - config/default.yaml: Base defaults
        - config/production.yaml: Production overrides
        - config/development.yaml: Development overrides
        - config/test.yaml: Test overrides
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",
    )

    # Application
    APP_NAME: str = "Crieur"
    APP_VERSION: str = "0.1.0"
    ENV: str = Field(default="production", description="Environment name")
    DEBUG: bool = Field(default=False, description="Debug mode")

    # API Server (mapped from YAML 'host' and 'port')
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8787, ge=1024, le=65535)

    # Heartbeat
    heartbeat_interval_ms: int = Field(
        default=1500,
        ge=1,
        description="Milliseconds between PING envelopes on each connection",
    )
    ping_timeout_limit: int = Field(
        default=50,
        ge=1,
        description="Unanswered pings before a client is declared dead",
    )

    # Event dispatch
    ack_timeout_ms: int = Field(
        default=5000,
        ge=1,
        description="Maximum wait for acknowledgements on require-ack emits",
    )
    id_length: int = Field(
        default=8,
        ge=4,
        le=32,
        description="Length of the random part of client and event IDs",
    )

    # History
    history_default_limit: int = Field(default=100, ge=1)
    history_max_limit: int = Field(default=1000, ge=1)

    # Log store
    store_backend: str = Field(
        default="memory",
        description="History store backend: 'memory' or 'redis'",
    )
    redis_host: str = Field(default="localhost")
    redis_port: int = Field(default=6379, ge=1, le=65535)
    redis_db: int = Field(default=0, ge=0, le=15)
    redis_password: Optional[str] = Field(default=None)
    redis_key_prefix: str = Field(default="crieur")

    # Graceful Shutdown
    shutdown_grace_period: int = Field(
        default=5,
        ge=0,
        description="Seconds to wait for WebSocket clients to close",
    )

    # Logging (mapped from YAML 'log_level')
    log_level: str = Field(default="info")
    log_file: Optional[str] = Field(default=None)
    verbose: int = Field(default=1, ge=0, le=3)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["debug", "info", "warning", "error", "critical"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"Invalid log_level. Must be one of: {allowed}")
        return v_lower

    @field_validator("store_backend")
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        """Validate store backend."""
        allowed = ["memory", "redis"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"Invalid store_backend. Must be one of: {allowed}")
        return v_lower

    @property
    def heartbeat_interval(self) -> float:
        """Heartbeat interval in seconds."""
        return self.heartbeat_interval_ms / 1000

    @property
    def ack_timeout(self) -> float:
        """Acknowledgement timeout in seconds."""
        return self.ack_timeout_ms / 1000


def load_config(
    config_file: Optional[str] = None,
    env_file: Optional[str] = None,
    env: Optional[str] = None,
) -> Settings:
    """
    Load configuration from YAML files and environment variables.

    Priority: ENV vars > environment-specific YAML > default YAML > defaults

    Args:
        config_file: Optional YAML config filename override
        env_file: Optional .env filename (e.g., ".env.development")
        env: Optional environment name override

    Returns:
        Settings instance

    Raises:
        ValidationError: If a configured value is invalid
    """
    # Find project root (4 levels up from this file)
    current_file = Path(__file__).resolve()
    project_root = current_file.parent.parent.parent.parent
    config_dir = Path(os.getenv("CRIEUR_CONFIG_DIR", project_root / "config"))

    # Determine environment (explicit parameter > ENV var > default)
    environment = env or os.getenv("ENV", "production")

    env_map = {
        "production": (".env.production", "production.yaml"),
        "development": (".env.development", "development.yaml"),
        "test": (".env.development", "test.yaml"),
    }

    # Load .env file FIRST (before Settings initialization)
    if env_file is None:
        default_env_file, default_config_file = env_map.get(
            environment, (".env.production", "production.yaml")
        )
        env_file = default_env_file
        if config_file is None:
            config_file = default_config_file

    env_file_path = project_root / env_file
    if env_file_path.exists():
        load_dotenv(env_file_path, override=True)

    default_config_path = config_dir / "default.yaml"
    merged_config = {}

    if default_config_path.exists():
        with open(default_config_path, "r") as f:
            loaded = yaml.safe_load(f)
            if loaded:
                merged_config = loaded

    # Environment-specific config overrides defaults
    if config_file:
        env_config_path = config_dir / config_file
        if env_config_path.exists():
            with open(env_config_path, "r") as f:
                loaded = yaml.safe_load(f)
                if loaded:
                    for key, value in loaded.items():
                        merged_config[key] = value

    # Environment variables win over YAML values
    for key in list(merged_config):
        if key in os.environ:
            merged_config.pop(key)

    return Settings(**merged_config)


# Global settings singleton (lazy initialization)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or initialize global settings singleton.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def override_settings(new_settings: Settings) -> None:
    """
    Override global settings (for testing).

    Args:
        new_settings: New Settings instance to use
    """
    global _settings
    _settings = new_settings


def reset_settings() -> None:
    """
    Reset settings to force re-initialization (for testing).
    """
    global _settings
    _settings = None
