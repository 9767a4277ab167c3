"""Invalid request errors raised before a backtest starts."""

from typing import Any, Optional


class InvalidInputError(ValueError):
    """Backtest request or configuration rejected up front."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Any = None, errors: Optional[list] = None):
        super().__init__(message)
        self.field = field
        self.value = value
        self.errors = errors or []
        self.recoverable = False
