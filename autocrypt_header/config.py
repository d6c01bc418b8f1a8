"""Settings for the provider handoff and logging.

Precedence, lowest first: defaults, the JSON config file, environment
variables (AUTOCRYPT_PROVIDER_URL, AUTOCRYPT_PROVIDER_TIMEOUT,
AUTOCRYPT_LOG_LEVEL).
"""
import json
import logging
import os
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER_TIMEOUT = 20.0
_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass(frozen=True)
class Settings:
    provider_url: Optional[str] = None
    provider_timeout: float = DEFAULT_PROVIDER_TIMEOUT
    log_level: str = 'WARNING'


def config_path() -> str:
    """Return the platform-specific path of the config file."""
    if os.name == 'nt':
        base = os.environ.get('APPDATA', os.path.expanduser('~'))
    else:
        base = os.environ.get('XDG_CONFIG_HOME', os.path.join(os.path.expanduser('~'), '.config'))
    return os.path.join(base, 'autocrypt-header', 'config.json')


def _load_file(path: str) -> dict:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as e:
        logger.warning('Ignoring unreadable config file %s: %s', path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning('Ignoring config file %s: expected a JSON object', path)
        return {}
    return data


def _timeout(value) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f'provider timeout must be a number, got {value!r}')
    if timeout <= 0:
        raise ConfigError(f'provider timeout must be positive, got {timeout}')
    return timeout


def _log_level(value) -> str:
    level = str(value).upper()
    if level not in _LOG_LEVELS:
        raise ConfigError(f'unknown log level {value!r}, expected one of {", ".join(_LOG_LEVELS)}')
    return level


def load_settings(path: Optional[str] = None, environ=None) -> Settings:
    environ = os.environ if environ is None else environ
    data = _load_file(path or config_path())

    url = environ.get('AUTOCRYPT_PROVIDER_URL') or data.get('provider_url') or None
    timeout = environ.get('AUTOCRYPT_PROVIDER_TIMEOUT') or data.get('provider_timeout', DEFAULT_PROVIDER_TIMEOUT)
    level = environ.get('AUTOCRYPT_LOG_LEVEL') or data.get('log_level', 'WARNING')

    return Settings(provider_url=url, provider_timeout=_timeout(timeout), log_level=_log_level(level))
