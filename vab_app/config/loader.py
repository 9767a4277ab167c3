"""Configuration loader: defaults < config/symbols.yaml < run overrides."""

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import InvalidInputError
from .defaults import DefaultConfig, config_from_dict, get_default_config

SYMBOLS_FILE = "symbols.yaml"


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


@dataclass(frozen=True)
class ConfigLoader:
    """Resolves the parameters used for one symbol in one run."""

    config_dir: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"
        return cls(config_dir=Path(config_dir), defaults=get_default_config())

    def symbol_overrides(self) -> dict[str, dict[str, Any]]:
        """
        Read every symbol section of symbols.yaml, keyed by upper-cased symbol.

        Raises:
            InvalidInputError: If the file is not a mapping of symbol sections
        """
        path = self.config_dir / SYMBOLS_FILE
        if not path.exists():
            return {}

        with open(path) as f:
            document = yaml.safe_load(f) or {}

        sections = (document.get("symbols") or {}) if isinstance(document, dict) else None
        if not isinstance(sections, dict) or not all(
            isinstance(section, dict) or section is None for section in sections.values()
        ):
            raise InvalidInputError(
                f"{path} must map symbols to parameter sections",
                field=SYMBOLS_FILE,
            )

        return {str(symbol).upper(): section or {} for symbol, section in sections.items()}

    def load_symbol_config(self, symbol: str) -> dict[str, Any]:
        return self.symbol_overrides().get(symbol.upper(), {})

    def merge_config(
        self,
        symbol: Optional[str] = None,
        run_overrides: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        """
        Merge configuration as plain dictionaries.

        Run overrides beat the symbol's section in symbols.yaml, which beats
        the built-in defaults.
        """
        config = asdict(self.defaults)
        if symbol:
            config = _deep_merge(config, self.load_symbol_config(symbol))
        if run_overrides:
            config = _deep_merge(config, run_overrides)
        return config

    def load(
        self,
        symbol: Optional[str] = None,
        run_overrides: Optional[dict[str, Any]] = None
    ) -> DefaultConfig:
        """Merge configuration and return it as typed parameter objects."""
        return config_from_dict(self.merge_config(symbol, run_overrides))
