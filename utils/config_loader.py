#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Config Loader

- Loads YAML configuration for the validator CLI and API
- Redacts sensitive fields before they reach debug logs
"""

from pathlib import Path
from typing import Dict, Any, Optional
import yaml

from utils.logger import get_logger

# Keys that should never be logged in plain text
SENSITIVE_KEYS = {"password", "api_key", "secret", "token", "auth"}


def _redact_config(config: Dict[str, Any]) -> Dict[str, Any]:
    redacted = {}
    for k, v in config.items():
        if isinstance(v, dict):
            redacted[k] = _redact_config(v)
        elif isinstance(v, list):
            redacted[k] = [
                _redact_config(i) if isinstance(i, dict) else i for i in v
            ]
        elif any(s in str(k).lower() for s in SENSITIVE_KEYS):
            redacted[k] = "***REDACTED***"
        else:
            redacted[k] = v
    return redacted


def load_config(path: str, logger: Optional[Any] = None) -> Dict[str, Any]:
    """
    Load a YAML config file.

    Args:
        path: Path to config file
        logger: Optional logger; if None, uses the config_loader logger

    Returns:
        Parsed configuration dict (empty when the file is empty)

    Raises:
        FileNotFoundError: the file does not exist
        yaml.YAMLError: the file is not valid YAML
        ValueError: the top level is not a mapping
    """
    log = logger or get_logger("config_loader", "INFO", "config_loader.log")

    config_path = Path(path)
    if not config_path.exists():
        log.error("Config file not found: %s", config_path)
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with config_path.open("r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        log.error("Failed to parse YAML config %s: %s", config_path, e, exc_info=True)
        raise

    if not isinstance(config, dict):
        log.error("Config file %s must contain a mapping at the top level", config_path)
        raise ValueError(f"Invalid config file at {path}: expected a mapping")

    log.info("Loaded config file: %s", config_path)
    log.debug("Config contents (redacted): %s", _redact_config(config))
    return config
