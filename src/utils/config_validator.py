"""Configuration validation utilities for the DCA toolkit."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any

from dca.validation import validate_aleo_address

KNOWN_NETWORKS = {"testnet", "mainnet", "canary"}
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
URL_FIELDS = ("explorer_url", "ans_url", "bridge_url")
_PROGRAM_ID_PATTERN = re.compile(r"^[a-z][a-z0-9_]*\.aleo$")


class ConfigValidationError(ValueError):
    """Raised when configuration validation fails."""


def validate_positive_decimal(
    config: dict[str, Any], field: str, *, required: bool = True
) -> None:
    """Validate that a field is a positive decimal value."""
    if field not in config:
        if required:
            raise ConfigValidationError(f"Missing required field: {field}")
        return

    value = config[field]
    if isinstance(value, bool):
        raise ConfigValidationError(f"{field} must be a valid number, got: {value}")
    try:
        decimal_value = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ConfigValidationError(
            f"{field} must be a valid number, got: {value}"
        ) from exc

    if not decimal_value.is_finite() or decimal_value <= 0:
        raise ConfigValidationError(f"{field} must be positive, got: {decimal_value}")


def validate_positive_integer(
    config: dict[str, Any], field: str, *, required: bool = True, minimum: int = 1
) -> None:
    """Validate that a field is a positive integer."""
    if field not in config:
        if required:
            raise ConfigValidationError(f"Missing required field: {field}")
        return

    value = config[field]
    if not isinstance(value, int) or isinstance(value, bool):
        raise ConfigValidationError(
            f"{field} must be an integer, got: {type(value).__name__}"
        )
    if value < minimum:
        raise ConfigValidationError(f"{field} must be >= {minimum}, got: {value}")


def validate_choice(
    config: dict[str, Any], field: str, choices: set[str], *, required: bool = True
) -> None:
    """Validate that a field is one of the allowed choices."""
    if field not in config:
        if required:
            raise ConfigValidationError(f"Missing required field: {field}")
        return

    value = config[field]
    if not isinstance(value, str):
        raise ConfigValidationError(
            f"{field} must be a string, got: {type(value).__name__}"
        )

    if value not in choices:
        choices_str = ", ".join(sorted(choices))
        raise ConfigValidationError(
            f"{field} must be one of [{choices_str}], got: {value}"
        )


def validate_boolean(config: dict[str, Any], field: str) -> None:
    if field in config and not isinstance(config[field], bool):
        raise ConfigValidationError(f"{field} must be a boolean")


def validate_non_empty_string(config: dict[str, Any], field: str) -> None:
    if field not in config:
        return
    value = config[field]
    if not isinstance(value, str) or not value.strip():
        raise ConfigValidationError(f"{field} must be a non-empty string")


def validate_url(config: dict[str, Any], field: str = "explorer_url") -> None:
    """Validate that a URL field is properly formatted."""
    if field not in config:
        return  # URL is usually optional with sensible defaults

    url = config[field]
    if not isinstance(url, str) or not url.strip():
        raise ConfigValidationError(f"{field} must be a non-empty string")

    if not re.match(r"^https?://", url, re.IGNORECASE):
        raise ConfigValidationError(
            f"{field} must start with http:// or https://, got: {url}"
        )


def validate_program_id(config: dict[str, Any], field: str = "program_id") -> None:
    if field not in config:
        return
    value = config[field]
    if not isinstance(value, str) or not _PROGRAM_ID_PATTERN.match(value):
        raise ConfigValidationError(
            f"{field} must look like 'name.aleo', got: {value!r}"
        )


def validate_owner(config: dict[str, Any], field: str = "owner") -> None:
    """Validate the owner address unless it is an ``${ENV}`` placeholder."""
    if field not in config:
        return
    value = config[field]
    if isinstance(value, str) and value.startswith("${"):
        return
    if not validate_aleo_address(value):
        raise ConfigValidationError(
            f"{field} must be an Aleo address (aleo1..., 63 characters)"
        )


def validate_config(config: dict[str, Any]) -> None:
    """
    Validate the DCA toolkit configuration.

    Every key is optional; present keys must be well formed.

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    if not isinstance(config, dict):
        raise ConfigValidationError("Configuration must be a dictionary")

    validate_choice(config, "network", KNOWN_NETWORKS, required=False)
    validate_non_empty_string(config, "chain_id")
    validate_program_id(config)
    validate_positive_integer(config, "fee", required=False, minimum=1)
    validate_boolean(config, "fee_private")
    for field in URL_FIELDS:
        validate_url(config, field)
    validate_positive_decimal(config, "poll_interval_sec", required=False)
    validate_positive_decimal(config, "request_timeout_sec", required=False)
    validate_positive_integer(config, "request_retries", required=False, minimum=0)
    validate_non_empty_string(config, "state_path")
    validate_owner(config)
    if "log_level" in config:
        level = config["log_level"]
        if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
            raise ConfigValidationError(
                f"log_level must be one of [{', '.join(sorted(LOG_LEVELS))}], got: {level}"
            )
