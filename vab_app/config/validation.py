"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any

ENTRY_POLICIES = ("reentry_cross", "consecutive_closes")
KLINE_INTERVALS = (
    "1m", "3m", "5m", "15m", "30m",
    "1h", "2h", "4h", "6h", "8h", "12h", "1d",
)


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_value_area_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate volume profile parameters."""
        errors = []

        # Validate target_fraction
        if "target_fraction" in params:
            value = params["target_fraction"]
            if not _is_number(value) or value <= 0 or value > 1:
                errors.append(ValidationError(
                    field="target_fraction",
                    message="Must be a number in (0, 1]",
                    value=value
                ))

        # Validate price_precision
        if "price_precision" in params:
            value = params["price_precision"]
            if not _is_int(value) or value < 0:
                errors.append(ValidationError(
                    field="price_precision",
                    message="Must be a non-negative integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_signal_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate entry detection parameters."""
        errors = []

        if "entry_policy" in params:
            value = params["entry_policy"]
            if value not in ENTRY_POLICIES:
                errors.append(ValidationError(
                    field="entry_policy",
                    message=f"Must be one of {', '.join(ENTRY_POLICIES)}",
                    value=value
                ))

        if "profit_target_pct" in params:
            value = params["profit_target_pct"]
            if not _is_number(value) or value <= 0 or value >= 1:
                errors.append(ValidationError(
                    field="profit_target_pct",
                    message="Must be a number in (0, 1)",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_fetch_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate bar source parameters."""
        errors = []

        if "base_url" in params:
            value = params["base_url"]
            if not isinstance(value, str) or not value.startswith(("http://", "https://")):
                errors.append(ValidationError(
                    field="base_url",
                    message="Must be an http(s) URL",
                    value=value
                ))

        for name in ("value_area_interval", "signal_interval"):
            if name in params and params[name] not in KLINE_INTERVALS:
                errors.append(ValidationError(
                    field=name,
                    message=f"Must be one of {', '.join(KLINE_INTERVALS)}",
                    value=params[name]
                ))

        # Binance caps klines per request at 1000
        if "page_limit" in params:
            value = params["page_limit"]
            if not _is_int(value) or value <= 0 or value > 1000:
                errors.append(ValidationError(
                    field="page_limit",
                    message="Must be an integer between 1 and 1000",
                    value=value
                ))

        for name in ("request_delay_ms", "max_retries"):
            if name in params:
                value = params[name]
                if not _is_int(value) or value < 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a non-negative integer",
                        value=value
                    ))

        if "retry_backoff_seconds" in params:
            value = params["retry_backoff_seconds"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field="retry_backoff_seconds",
                    message="Must be a non-negative number",
                    value=value
                ))

        if "timeout_seconds" in params:
            value = params["timeout_seconds"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="timeout_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_batch_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate batch limits."""
        errors = []

        for name in ("max_symbols", "max_workers"):
            if name in params:
                value = params[name]
                if not _is_int(value) or value <= 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a positive integer",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if "value_area" in config:
            errors.extend(ConfigValidator.validate_value_area_params(config["value_area"]))

        if "signal" in config:
            errors.extend(ConfigValidator.validate_signal_params(config["signal"]))

        if "fetch" in config:
            errors.extend(ConfigValidator.validate_fetch_params(config["fetch"]))

        if "batch" in config:
            errors.extend(ConfigValidator.validate_batch_params(config["batch"]))

        return errors
