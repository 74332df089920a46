"""
Flipbook Configuration
======================

This module handles configuration loading for the flipbook engine.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. flipbook.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    FLIPBOOK_LOG_LEVEL              -> logging.level
    FLIPBOOK_LOG_FORMAT             -> logging.format
    FLIPBOOK_CHECK_THREAD_AFFINITY  -> engine.check_thread_affinity
    FLIPBOOK_DEFAULT_FRAME_COUNT    -> loader.default_frame_count
    FLIPBOOK_MAX_READ_FAILURES      -> loader.max_read_failures

Example:
    from flipbook.config import get_settings, setup_logging
    
    settings = get_settings()
    setup_logging(settings)
    print(settings.loader.default_frame_count)
"""

import os
import logging
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class EngineConfig(BaseModel):
    """Playback engine configuration."""
    
    check_thread_affinity: bool = Field(
        default=True,
        description="Raise ExecutorAffinityError on calls from the wrong thread",
    )


class LoaderConfig(BaseModel):
    """Frame loader configuration."""
    
    default_frame_count: int = Field(
        default=30,
        ge=1,
        description="Frames sampled from a video when no count is given",
    )
    max_read_failures: int = Field(
        default=10,
        ge=0,
        description="Consecutive failed reads before a video load errors out",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""
    
    level: str = Field(default="INFO", description="Log level")
    format: Literal["json", "text"] = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for the flipbook engine.
    
    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """
    
    engine: EngineConfig = Field(default_factory=EngineConfig)
    loader: LoaderConfig = Field(default_factory=LoaderConfig)
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
        config_path: Path to flipbook.yaml. If None, searches the CWD.
        
    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        for path in (Path("flipbook.yaml"), Path("flipbook.yml")):
            if path.exists():
                config_path = str(path)
                break
    
    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.debug("No config file found, using defaults and environment variables")
    
    _apply_env_overrides(config_data)
    
    return Settings.model_validate(config_data)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""
    
    # Engine settings
    if env_affinity := os.environ.get("FLIPBOOK_CHECK_THREAD_AFFINITY"):
        config_data.setdefault("engine", {})["check_thread_affinity"] = _parse_bool(env_affinity)
    
    # Loader settings
    if env_count := os.environ.get("FLIPBOOK_DEFAULT_FRAME_COUNT"):
        config_data.setdefault("loader", {})["default_frame_count"] = int(env_count)
    if env_failures := os.environ.get("FLIPBOOK_MAX_READ_FAILURES"):
        config_data.setdefault("loader", {})["max_read_failures"] = int(env_failures)
    
    # Logging settings
    if env_log := os.environ.get("FLIPBOOK_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log
    if env_format := os.environ.get("FLIPBOOK_LOG_FORMAT"):
        config_data.setdefault("logging", {})["format"] = env_format


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

_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def reset_settings() -> None:
    """Forget cached settings so the next get_settings() reloads them."""
    global _settings
    _settings = None
