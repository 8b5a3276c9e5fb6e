"""
Launchpad configuration loading and validation.
"""

import os
from typing import Any

import yaml
from dotenv import load_dotenv

import config as defaults
from interfaces.core import TokenStandard

REQUIRED_FIELDS = [
    "rpc_endpoint",
    "private_key",
]

CONFIG_VALIDATION_RULES = [
    ("token.decimals", int, 0, defaults.MAX_DECIMALS, f"token.decimals must be between 0 and {defaults.MAX_DECIMALS}"),
    ("priority_fee", int, 0, float("inf"), "priority_fee must be a non-negative integer"),
    ("confirmation.poll_interval", (int, float), 0.1, 60, "confirmation.poll_interval must be between 0.1 and 60 seconds"),
]

# Valid values for enum-like fields
VALID_VALUES = {
    "token.standard": [standard.value for standard in TokenStandard],
    "commitment": ["processed", "confirmed", "finalized"],
    "log_level": ["DEBUG", "INFO", "WARNING", "ERROR"],
}

DEFAULTS = {
    "commitment": defaults.COMMITMENT,
    "skip_preflight": defaults.SKIP_PREFLIGHT,
    "priority_fee": defaults.PRIORITY_FEE,
    "log_level": defaults.LOG_LEVEL,
    "token": {
        "standard": defaults.DEFAULT_STANDARD,
        "decimals": defaults.DEFAULT_DECIMALS,
    },
    "confirmation": {
        "poll_interval": defaults.CONFIRMATION_POLL_INTERVAL,
    },
}


def load_launchpad_config(path: str) -> dict:
    """Load and validate a launchpad configuration from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Configuration with defaults applied and environment variables resolved

    Raises:
        ValueError: If a required field is missing or a value is invalid
    """
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
    apply_defaults(config, DEFAULTS)
    validate_config(config)
    return config


def resolve_env_vars(config: dict) -> None:
    """Recursively resolve ${VAR} values from the environment."""
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


def apply_defaults(config: dict, default_values: dict) -> None:
    """Fill in missing keys, descending into nested sections."""
    for key, value in default_values.items():
        if isinstance(value, dict):
            section = config.setdefault(key, {})
            if not isinstance(section, dict):
                raise ValueError(f"Config section '{key}' must be a mapping")
            apply_defaults(section, value)
        else:
            config.setdefault(key, value)


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
    """Validate the configuration against the defined rules."""
    for field in REQUIRED_FIELDS:
        if not get_nested_value(config, field):
            raise ValueError(f"Config key {field} must not be empty")

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

    if not isinstance(config.get("skip_preflight"), bool):
        raise ValueError("skip_preflight must be true or false")


def get_standard_from_config(config: dict) -> TokenStandard:
    """Extract the default token standard from the configuration."""
    return TokenStandard(get_nested_value(config, "token.standard"))


def print_config_summary(config: dict) -> None:
    """Print a summary of the loaded configuration."""
    print(f"Launchpad: {config.get('name', 'unnamed')}")
    print(f"RPC endpoint: {config['rpc_endpoint']}")
    print(f"Commitment: {config['commitment']}")
    print(f"Default standard: {config['token']['standard']}")
    print(f"Default decimals: {config['token']['decimals']}")

    priority_fee = config["priority_fee"]
    if priority_fee:
        print(f"Priority fee: {priority_fee} microlamports per compute unit")
    else:
        print("Priority fee: disabled")

    if config["skip_preflight"]:
        print("Preflight: skipped")

    print("Configuration loaded successfully!")
