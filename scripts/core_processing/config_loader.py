# ABOUTME: Configuration loading module for the monitoring dashboard
# ABOUTME: Loads dashboard settings from JSON with defaults for missing entries

import copy
import json
import logging
import os
from pathlib import Path

API_BASE_URL_ENV = "HYDROMON_API_BASE_URL"

DEFAULT_SETTINGS = {
    "api_base_url": "http://localhost:3000/api/external",
    "request_timeout_s": 30,
    "poll_interval_s": 300,
    "auto_loop": {
        "inactivity_ms": 30000,
        "dwell_ms": 30000,
        "min_viewport_width": 2500,
    },
    "page_size": 100,
    "export_dir": "exports",
    "log_file": "logs/dashboard.log",
}


def load_config(config_path):
    """
    Load configuration from JSON file.

    Args:
        config_path (str or Path): Path to the JSON configuration file

    Returns:
        dict or None: Configuration dictionary, or None if loading failed
    """
    try:
        with open(config_path, "r") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logging.error(f"Error loading configuration from {config_path}: {e}")
        return None


def _fill_defaults(settings, defaults, prefix=""):
    for key, default_value in defaults.items():
        if key not in settings:
            settings[key] = copy.deepcopy(default_value)
            logging.warning(f"Setting {prefix}{key} not found in config. Using default: {default_value}")
        elif isinstance(default_value, dict) and isinstance(settings[key], dict):
            _fill_defaults(settings[key], default_value, prefix=f"{prefix}{key}.")
    return settings


def load_dashboard_settings(settings_path, project_root):
    """
    Load dashboard settings from JSON file with defaults for missing entries.

    Args:
        settings_path (str or Path): Path to dashboard_config.json
        project_root (Path): Project root directory path for resolving relative paths

    Returns:
        dict: Settings dictionary with defaults for missing entries. The
              HYDROMON_API_BASE_URL environment variable overrides api_base_url.
    """
    # Convert to Path object if string is provided
    if isinstance(settings_path, str):
        settings_path = Path(settings_path)

    # Resolve relative path if needed
    if not settings_path.is_absolute():
        settings_path = project_root / settings_path

    logging.info(f"Loading dashboard settings from {settings_path}")
    settings = load_config(settings_path)

    # If loading failed, use defaults and log warning
    if settings is None:
        logging.warning(f"Failed to load dashboard settings from {settings_path}. Using defaults.")
        settings = {}

    settings = _fill_defaults(settings, DEFAULT_SETTINGS)

    env_url = os.environ.get(API_BASE_URL_ENV)
    if env_url:
        logging.info(f"Using API base URL from {API_BASE_URL_ENV}")
        settings["api_base_url"] = env_url

    # Relative output paths are anchored at the project root
    for key in ("export_dir", "log_file"):
        path = Path(settings[key])
        if not path.is_absolute():
            settings[key] = str(project_root / path)

    logging.info(f"API base URL: {settings['api_base_url']}")
    return settings
