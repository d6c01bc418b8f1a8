"""Fire-and-forget handoff of peer updates to a key-store provider.

An update is submitted once on a background thread. Nothing waits for it:
there is no retry, no timeout beyond the HTTP one, and no record of
in-flight requests. Only success reaches the observer; failures are logged.
"""
import logging
import threading
from typing import Callable, Optional

import requests

from .config import DEFAULT_PROVIDER_TIMEOUT, Settings
from .peer_update import PeerUpdateRecord

logger = logging.getLogger(__name__)

Observer = Callable[[PeerUpdateRecord], None]


def log_success(record: PeerUpdateRecord) -> None:
    logger.debug('Autocrypt update OK for %s', record.peer_address)


class KeyStoreProvider:
    """POSTs peer updates as JSON to an HTTP key-store endpoint."""

    def __init__(self, url: str, timeout: float = DEFAULT_PROVIDER_TIMEOUT, session=None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def _send(self, record: PeerUpdateRecord, on_success: Observer) -> None:
        try:
            r = self.session.post(self.url, json=record.to_payload(), timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            logger.warning('Autocrypt update for %s not delivered: %s', record.peer_address, e)
            return
        on_success(record)

    def submit_peer_update(self, record: PeerUpdateRecord, on_success: Optional[Observer] = None) -> threading.Thread:
        t = threading.Thread(target=self._send, args=(record, on_success or log_success), daemon=True)
        t.start()
        return t


class NullProvider:
    """Used when no endpoint is configured: logs the update and drops it."""

    def submit_peer_update(self, record: PeerUpdateRecord, on_success: Optional[Observer] = None) -> None:
        logger.info('No key-store provider configured; dropping update for %s', record.peer_address)


def provider_from_settings(settings: Settings):
    if not settings.provider_url:
        return NullProvider()
    return KeyStoreProvider(settings.provider_url, settings.provider_timeout)
