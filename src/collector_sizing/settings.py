"""Settings loader for the collector sizing tools."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .defaults import default_config
from .errors import ConfigurationError
from .models import SizingConfig

logger = logging.getLogger(__name__)

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseSettings):
    """Environment-based settings (COLLECTOR_SIZING_* or .env)."""

    model_config = SettingsConfigDict(
        env_prefix="COLLECTOR_SIZING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"
    log_format: str = DEFAULT_LOG_FORMAT
    # YAML or JSON file overriding the built-in default configuration
    config_path: Optional[str] = None


def load_config_file(path: str) -> Dict[str, Any]:
    """Load a YAML (.yaml/.yml) or JSON configuration file. Missing file -> {}."""
    config_path = Path(path)
    if not config_path.exists():
        logger.warning("Config file %s not found, using built-in defaults", config_path)
        return {}

    with open(config_path, encoding="utf-8") as f:
        if config_path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_path}: expected a mapping at the top level")
    return data


def get_default_config(settings: Optional[Settings] = None) -> SizingConfig:
    """
    Built-in defaults, overlaid with the keys of settings.config_path.

    Keys may use either the export spelling (maxLoad, methodWeights, ...) or
    the field names (max_load, method_weights, ...). Whole maps are replaced,
    not merged.
    """
    settings = settings or Settings()
    base = default_config()
    if not settings.config_path:
        return base

    overrides = load_config_file(settings.config_path)
    if not overrides:
        return base

    data = base.model_dump()
    fields = SizingConfig.model_fields
    aliases = {f.alias: name for name, f in fields.items() if f.alias}
    for key, value in overrides.items():
        name = aliases.get(key, key)
        if name not in fields:
            logger.warning("Ignoring unknown config key %r in %s", key, settings.config_path)
            continue
        data[name] = value

    try:
        config = SizingConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"{settings.config_path}: {e}") from e
    logger.info("Loaded configuration overrides from %s", settings.config_path)
    return config


def setup_logging(level: str = "INFO", fmt: str = DEFAULT_LOG_FORMAT) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=fmt)
