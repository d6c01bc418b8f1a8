import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from autocrypt_header.diagnostics import CollectingSink, RejectReason
from autocrypt_header.parser import HeaderRecord
from autocrypt_header.peer_update import build_peer_update, effective_date

T1 = datetime(2025, 10, 14, 9, 0, tzinfo=timezone.utc)
T2 = T1 + timedelta(hours=3)
RECORD = HeaderRecord(address='a@b.com', key_data=b'\x01\x02\x03', prefer_encrypt_mutual=True)


@pytest.mark.parametrize('sent, internal', [(T1, T2), (T2, T1), (T1, T1)])
def test_effective_date_is_earliest(sent, internal):
    update = build_peer_update(RECORD, 'a@b.com', sent, internal)
    assert update.effective_date == min(sent, internal)


def test_backdated_sent_date_wins_over_later_receipt():
    forged = T1 - timedelta(days=365)
    assert build_peer_update(RECORD, 'a@b.com', forged, T1).effective_date == forged


def test_future_sent_date_is_capped_by_receipt():
    assert build_peer_update(RECORD, 'a@b.com', T2 + timedelta(days=30), T2).effective_date == T2


def test_address_match_ignores_case():
    update = build_peer_update(RECORD, 'A@B.COM', T1, T2)
    assert update is not None
    assert update.peer_address == 'A@B.COM'
    assert update.key_data == b'\x01\x02\x03'
    assert update.prefer_encrypt_mutual is True


def test_address_match_does_not_fold_special_cases():
    record = HeaderRecord(address='stra\u00dfe@example.org', key_data=b'\x01')
    sink = CollectingSink()
    assert build_peer_update(record, 'STRASSE@example.org', T1, T2, sink=sink) is None
    assert build_peer_update(record, 'strasse@example.org', T1, T2, sink=sink) is None
    assert sink.reasons == [RejectReason.ADDRESS_MISMATCH, RejectReason.ADDRESS_MISMATCH]
    assert build_peer_update(record, 'STRA\u00dfE@EXAMPLE.ORG', T1, T2) is not None


def test_address_mismatch_yields_nothing():
    sink = CollectingSink()
    assert build_peer_update(RECORD, 'x@y.com', T1, T2, sink=sink) is None
    assert sink.reasons == [RejectReason.ADDRESS_MISMATCH]


def test_missing_from_address_yields_nothing():
    assert build_peer_update(RECORD, None, T1, T2, sink=CollectingSink()) is None


def test_naive_dates_are_treated_as_utc():
    naive = datetime(2025, 10, 14, 8, 0)
    assert effective_date(naive, T1) == naive.replace(tzinfo=timezone.utc)


def test_single_available_date_is_used():
    assert effective_date(None, T2) == T2
    assert effective_date(T1, None) == T1
    with pytest.raises(ValueError):
        effective_date(None, None)


def test_payload():
    payload = build_peer_update(RECORD, 'a@b.com', T1, T2).to_payload()
    assert payload == {
        'peer_id': 'a@b.com',
        'effective_date': '2025-10-14T09:00:00+00:00',
        'key_data': 'AQID',
        'prefer_encrypt_mutual': True,
    }
