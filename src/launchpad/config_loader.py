"""
Configuration loading and validation for the token launchpad.
"""

import os
from typing import Any

import yaml
from dotenv import load_dotenv

from launchpad.core.pubkeys import CLUSTERS

REQUIRED_FIELDS = [
    "name",
    "cluster",
    "rpc_endpoint",
    "private_key",
]

CONFIG_VALIDATION_RULES = [
    ("confirmation.max_attempts", int, 1, 1000, "confirmation.max_attempts must be between 1 and 1000"),
    ("confirmation.poll_interval", (int, float), 0, 60, "confirmation.poll_interval must be between 0 and 60 seconds"),
    ("send.max_retries", int, 1, 10, "send.max_retries must be between 1 and 10"),
]

# Valid values for enum-like fields
VALID_VALUES = {
    "cluster": list(CLUSTERS),
    "commitment": ["processed", "confirmed", "finalized"],
    "logging.level": ["DEBUG", "INFO", "WARNING", "ERROR"],
}

DEFAULTS = {
    "commitment": "confirmed",
    "confirmation": {"max_attempts": 30, "poll_interval": 1.0},
    "send": {"skip_preflight": False, "max_retries": 3},
    "logging": {"level": "INFO"},
}


def load_config(path: str) -> dict:
    """Load and validate a launchpad configuration from a YAML file."""
    with open(path) as f:
        config = yaml.safe_load(f) or {}

    env_file = config.get("env_file")
    if env_file:
        env_path = os.path.join(os.path.dirname(path), env_file)
        if os.path.exists(env_path):
            load_dotenv(env_path, override=True)
        else:
            load_dotenv(env_file, override=True)

    resolve_env_vars(config)
    apply_defaults(config)
    validate_config(config)
    return config


def apply_defaults(config: dict, defaults: dict = DEFAULTS) -> None:
    """Fill in missing keys from `defaults`, recursing into sections."""
    for key, value in defaults.items():
        if isinstance(value, dict):
            section = config.setdefault(key, {})
            if isinstance(section, dict):
                apply_defaults(section, value)
        else:
            config.setdefault(key, value)


def resolve_env_vars(config: dict) -> None:
    """Recursively resolve environment variables in the configuration."""
    def resolve_env(value):
        if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
            env_var = value[2:-1]
            env_value = os.getenv(env_var)
            if env_value is None:
                raise ValueError(f"Environment variable '{env_var}' not found")
            return env_value
        return value

    def resolve_all(d):
        for k, v in d.items():
            if isinstance(v, dict):
                resolve_all(v)
            else:
                d[k] = resolve_env(v)

    resolve_all(config)


def get_nested_value(config: dict, path: str) -> Any:
    """Get a nested value from the configuration using dot notation."""
    keys = path.split(".")
    value = config
    for key in keys:
        if not isinstance(value, dict) or key not in value:
            raise ValueError(f"Missing required config key: {path}")
        value = value[key]
    return value


def validate_config(config: dict) -> None:
    """Validate the configuration against defined rules."""
    for field in REQUIRED_FIELDS:
        get_nested_value(config, field)

    rpc_endpoint = config["rpc_endpoint"]
    if not isinstance(rpc_endpoint, str) or not rpc_endpoint.startswith(("http://", "https://")):
        raise ValueError("Invalid RPC endpoint. Must start with http:// or https://")

    for path, expected_type, min_val, max_val, error_msg in CONFIG_VALIDATION_RULES:
        try:
            value = get_nested_value(config, path)
        except ValueError:
            continue

        if isinstance(value, bool) or not isinstance(value, expected_type):
            raise ValueError(f"Type error: {error_msg}")

        if not (min_val <= value <= max_val):
            raise ValueError(f"Range error: {error_msg}")

    for path, valid_values in VALID_VALUES.items():
        try:
            value = get_nested_value(config, path)
        except ValueError:
            continue
        if value not in valid_values:
            raise ValueError(f"{path} must be one of {valid_values}")

    if not isinstance(get_nested_value(config, "send.skip_preflight"), bool):
        raise ValueError("Type error: send.skip_preflight must be a boolean")


def print_config_summary(config: dict) -> None:
    """Print a summary of the loaded configuration."""
    print(f"Launchpad: {config.get('name', 'unnamed')}")
    print(f"Cluster: {config.get('cluster')}")
    print(f"RPC endpoint: {config.get('rpc_endpoint')}")
    print(f"Commitment: {config.get('commitment')}")

    confirmation = config.get("confirmation", {})
    print("Confirmation:")
    print(f"  - Max attempts: {confirmation.get('max_attempts')}")
    print(f"  - Poll interval: {confirmation.get('poll_interval')}s")

    send = config.get("send", {})
    print(f"Preflight: {'skipped' if send.get('skip_preflight') else 'enabled'}")
