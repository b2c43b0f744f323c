"""Configuration models using Pydantic for validation."""
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
import os


class ConverterConfig(BaseModel):
    """How parsed metrics are shaped into rows."""
    # "input" keeps labels in the order they appear on the sample line
    label_order: Literal["input", "sorted"] = "input"


class APIConfig(BaseModel):
    """HTTP conversion API configuration."""
    enabled: bool = True
    port: int = 8082
    bind_address: str = "0.0.0.0"
    max_body_bytes: int = 10 * 1024 * 1024

    @field_validator('port')
    @classmethod
    def validate_port(cls, v):
        """Ports must be in the TCP range."""
        if not 0 < v < 65536:
            raise ValueError(f"Invalid port: {v}")
        return v

    @field_validator('max_body_bytes')
    @classmethod
    def validate_max_body_bytes(cls, v):
        if v <= 0:
            raise ValueError("max_body_bytes must be positive")
        return v


class GlobalConfig(BaseModel):
    """Global configuration settings."""
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "text"

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            raise ValueError(f"Invalid log level: {v}")
        return level


class Config(BaseModel):
    """Root configuration model."""
    model_config = ConfigDict(populate_by_name=True)

    global_: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    converter: ConverterConfig = Field(default_factory=ConverterConfig)
    api: APIConfig = Field(default_factory=APIConfig)


def _apply_env_overrides(raw_config: dict) -> dict:
    """Apply environment variable overrides on top of file values."""
    if env_log_level := os.getenv('LOG_LEVEL'):
        raw_config.setdefault('global', {})['log_level'] = env_log_level

    if env_label_order := os.getenv('PROMTABLE_LABEL_ORDER'):
        raw_config.setdefault('converter', {})['label_order'] = env_label_order

    if env_port := os.getenv('PROMTABLE_API_PORT'):
        raw_config.setdefault('api', {})['port'] = env_port

    return raw_config


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate configuration from a YAML file, or defaults when no path is given."""
    import yaml

    raw_config = {}
    if config_path is not None:
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

    raw_config = _apply_env_overrides(raw_config)

    try:
        config = Config(**raw_config)
        return config
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")
