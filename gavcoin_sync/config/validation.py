"""Configuration validation utilities."""

import re
from dataclasses import dataclass, fields
from typing import Any

from .defaults import (
    DisplayParams,
    LoggingParams,
    RegistryParams,
    RpcParams,
    SyncParams,
)

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_URL_RE = re.compile(r"^(https?|wss?)://[^\s/]+")

_KNOWN_FIELDS = {
    "rpc": {f.name for f in fields(RpcParams)},
    "registry": {f.name for f in fields(RegistryParams)},
    "display": {f.name for f in fields(DisplayParams)},
    "sync": {f.name for f in fields(SyncParams)},
    "logging": {f.name for f in fields(LoggingParams)},
}


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_rpc_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate remote node connection parameters."""
        errors = []

        if "url" in params:
            value = params["url"]
            if not isinstance(value, str) or not _URL_RE.match(value):
                errors.append(ValidationError(
                    field="rpc.url",
                    message="Must be an http(s) or ws(s) URL",
                    value=value
                ))

        for name in ("timeout_seconds", "poll_interval_seconds"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value <= 0:
                    errors.append(ValidationError(
                        field=f"rpc.{name}",
                        message="Must be a positive number",
                        value=value
                    ))

        if "max_poll_failures" in params:
            value = params["max_poll_failures"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                errors.append(ValidationError(
                    field="rpc.max_poll_failures",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_registry_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate registry lookup parameters."""
        errors = []

        for name in ("contract_name", "category_tag"):
            if name in params:
                value = params[name]
                if not isinstance(value, str) or not value:
                    errors.append(ValidationError(
                        field=f"registry.{name}",
                        message="Must be a non-empty string",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_display_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate scaling and formatting parameters."""
        errors = []

        for name in ("token_decimals", "native_decimals", "token_places", "native_places"):
            if name in params:
                value = params[name]
                if not isinstance(value, int) or isinstance(value, bool) or value < 0 or value > 36:
                    errors.append(ValidationError(
                        field=f"display.{name}",
                        message="Must be an integer between 0 and 36",
                        value=value
                    ))

        if "unnamed_label" in params and not isinstance(params["unnamed_label"], str):
            errors.append(ValidationError(
                field="display.unnamed_label",
                message="Must be a string",
                value=params["unnamed_label"]
            ))

        return errors

    @staticmethod
    def validate_sync_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate synchronization policy parameters."""
        errors = []

        if "reject_stale_passes" in params:
            value = params["reject_stale_passes"]
            if not isinstance(value, bool):
                errors.append(ValidationError(
                    field="sync.reject_stale_passes",
                    message="Must be a boolean",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate logging parameters."""
        errors = []

        if "level" in params:
            value = params["level"]
            if not isinstance(value, str) or value.upper() not in _LOG_LEVELS:
                errors.append(ValidationError(
                    field="logging.level",
                    message=f"Must be one of {sorted(_LOG_LEVELS)}",
                    value=value
                ))

        if "format_json" in params and not isinstance(params["format_json"], bool):
            errors.append(ValidationError(
                field="logging.format_json",
                message="Must be a boolean",
                value=params["format_json"]
            ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        for section, value in config.items():
            if section not in _KNOWN_FIELDS:
                errors.append(ValidationError(
                    field=section,
                    message="Unknown configuration section",
                    value=value
                ))
                continue

            if not isinstance(value, dict):
                errors.append(ValidationError(
                    field=section,
                    message="Must be a mapping",
                    value=value
                ))
                continue

            for key in value:
                if key not in _KNOWN_FIELDS[section]:
                    errors.append(ValidationError(
                        field=f"{section}.{key}",
                        message="Unknown configuration field",
                        value=value[key]
                    ))

        if errors:
            return errors

        errors.extend(ConfigValidator.validate_rpc_params(config.get("rpc", {})))
        errors.extend(ConfigValidator.validate_registry_params(config.get("registry", {})))
        errors.extend(ConfigValidator.validate_display_params(config.get("display", {})))
        errors.extend(ConfigValidator.validate_sync_params(config.get("sync", {})))
        errors.extend(ConfigValidator.validate_logging_params(config.get("logging", {})))

        return errors
