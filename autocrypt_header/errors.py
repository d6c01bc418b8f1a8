"""Exception types. Only contract violations are raised; bad header data never is."""
from typing import Optional


class AutocryptError(Exception):

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class UnsupportedParametersError(AutocryptError):
    """Serialization was asked to emit extension parameters."""

    def __init__(self, parameters: dict) -> None:
        super().__init__('arbitrary parameters not supported', {'parameters': sorted(parameters)})
        self.parameters = dict(parameters)


class ConfigError(AutocryptError):
    pass
