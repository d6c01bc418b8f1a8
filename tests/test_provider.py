import sys
from datetime import datetime, timezone
from pathlib import Path

import requests

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from autocrypt_header.config import Settings
from autocrypt_header.peer_update import PeerUpdateRecord
from autocrypt_header.provider import KeyStoreProvider, NullProvider, provider_from_settings

UPDATE = PeerUpdateRecord(peer_address='a@b.com', effective_date=datetime(2025, 10, 14, tzinfo=timezone.utc),
                          key_data=b'\x01\x02\x03', prefer_encrypt_mutual=False)


class FakeResponse:
    def __init__(self, status):
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f'{self.status_code} error')


class FakeSession:
    def __init__(self, status=200, exc=None):
        self.calls = []
        self.status = status
        self.exc = exc

    def post(self, url, json=None, timeout=None):
        self.calls.append((url, json, timeout))
        if self.exc:
            raise self.exc
        return FakeResponse(self.status)


def test_submit_posts_payload_and_calls_observer():
    session = FakeSession()
    seen = []
    provider = KeyStoreProvider('https://keys.example.org/peer', timeout=3, session=session)
    provider.submit_peer_update(UPDATE, seen.append).join(5)
    assert session.calls == [('https://keys.example.org/peer', UPDATE.to_payload(), 3)]
    assert seen == [UPDATE]


def test_http_error_is_logged_not_raised(caplog):
    seen = []
    provider = KeyStoreProvider('https://keys.example.org/peer', session=FakeSession(status=503))
    provider.submit_peer_update(UPDATE, seen.append).join(5)
    assert seen == []
    assert 'not delivered' in caplog.text


def test_connection_error_is_logged_not_raised(caplog):
    seen = []
    provider = KeyStoreProvider('https://keys.example.org/peer',
                                session=FakeSession(exc=requests.ConnectionError('refused')))
    provider.submit_peer_update(UPDATE, seen.append).join(5)
    assert seen == []
    assert 'refused' in caplog.text


def test_provider_from_settings():
    assert isinstance(provider_from_settings(Settings()), NullProvider)
    provider = provider_from_settings(Settings(provider_url='https://keys.example.org', provider_timeout=7))
    assert isinstance(provider, KeyStoreProvider)
    assert provider.timeout == 7


def test_null_provider_drops_update():
    assert NullProvider().submit_peer_update(UPDATE) is None
