"""Default configuration parameters for the value area backtester."""

from dataclasses import dataclass, fields
from typing import Any


@dataclass(frozen=True)
class ValueAreaParams:
    """Volume profile parameters."""
    target_fraction: float = 0.70                    # Share of session volume inside VAL..VAH
    price_precision: int = 2                         # Decimal places for price buckets


@dataclass(frozen=True)
class SignalParams:
    """Entry detection and diagnostic parameters."""
    entry_policy: str = "reentry_cross"              # reentry_cross | consecutive_closes
    profit_target_pct: float = 0.03                  # Diagnostic target distance from entry


@dataclass(frozen=True)
class FetchParams:
    """Bar source parameters."""
    base_url: str = "https://api.binance.com"
    value_area_interval: str = "5m"                  # Previous-day bars for the profile
    signal_interval: str = "30m"                     # Current-day bars for entry detection
    page_limit: int = 1000                           # Max klines per request
    request_delay_ms: int = 100                      # Global spacing between requests
    max_retries: int = 3
    retry_backoff_seconds: float = 1.0
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class BatchParams:
    """Backtest batch limits."""
    max_symbols: int = 10
    max_workers: int = 1                             # 1 = sequential


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    value_area: ValueAreaParams
    signal: SignalParams
    fetch: FetchParams
    batch: BatchParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        value_area=ValueAreaParams(),
        signal=SignalParams(),
        fetch=FetchParams(),
        batch=BatchParams(),
    )


def config_from_dict(data: dict[str, Any]) -> DefaultConfig:
    """Build a DefaultConfig from a merged configuration dictionary.

    Unknown keys are ignored so that YAML files may carry comments-as-keys or
    settings for other tools.
    """
    def build(cls, section: dict[str, Any]):
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in section.items() if k in known})

    return DefaultConfig(
        value_area=build(ValueAreaParams, data.get("value_area", {})),
        signal=build(SignalParams, data.get("signal", {})),
        fetch=build(FetchParams, data.get("fetch", {})),
        batch=build(BatchParams, data.get("batch", {})),
    )
