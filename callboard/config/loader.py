"""
Configuration loading for callboard.

Handles loading configuration from ~/.callboard/config.json with sensible defaults.
"""

import json
from pathlib import Path
from typing import Dict, Any, Optional
import copy

DEFAULT_CONFIG: Dict[str, Any] = {
    "database_path": "~/.callboard/analytics.db",

    # Remembered identity between sessions
    "state_path": "~/.callboard/state.json",

    # Base URL of a running callboard server; None talks to the database directly
    "api_url": None,

    # Seconds before a remote store request is abandoned
    "request_timeout": 10.0,

    # Web dashboard server
    "server": {
        "host": "127.0.0.1",
        "port": 8080,
    },
}


def get_config_path() -> Path:
    """Get path to config file."""
    return Path.home() / ".callboard" / "config.json"


def get_database_path(config: Dict[str, Any]) -> Path:
    """Get expanded database path from config."""
    return Path(config["database_path"]).expanduser()


def get_state_path(config: Dict[str, Any]) -> Path:
    """Get expanded client state path from config."""
    return Path(config["state_path"]).expanduser()


def get_api_url(config: Dict[str, Any]) -> Optional[str]:
    """Get the API base URL without a trailing slash, or None."""
    url = config.get("api_url")
    if not url:
        return None
    return str(url).rstrip("/")


def load_config() -> Dict[str, Any]:
    """
    Load configuration from file, merging with defaults.

    Returns a complete configuration with all default values filled in.
    User config overrides defaults where specified.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    config_path = get_config_path()

    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                user_config = json.load(f)

            # Shallow merge nested sections
            if isinstance(user_config.get('server'), dict):
                config['server'].update(user_config['server'])

            # Direct override for simple values
            for key in ['database_path', 'state_path', 'api_url', 'request_timeout']:
                if key in user_config:
                    config[key] = user_config[key]

        except json.JSONDecodeError as e:
            print(f"Warning: Could not parse config file: {e}")
        except Exception as e:
            print(f"Warning: Error loading config: {e}")

    return config


def save_config(config: Dict[str, Any]) -> None:
    """Save configuration to file."""
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(config, f, indent=2)
