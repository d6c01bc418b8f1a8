"""Turn a selected header into the update handed to the key-store provider."""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from .diagnostics import RejectReason, Sink, resolve
from .parameters import encode_key_data
from .parser import HeaderRecord


@dataclass(frozen=True)
class PeerUpdateRecord:
    peer_address: str
    effective_date: datetime
    key_data: bytes
    prefer_encrypt_mutual: bool = False

    def to_payload(self) -> dict:
        return {
            'peer_id': self.peer_address,
            'effective_date': self.effective_date.isoformat(),
            'key_data': encode_key_data(self.key_data),
            'prefer_encrypt_mutual': self.prefer_encrypt_mutual,
        }


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def effective_date(sent_date: Optional[datetime], internal_date: Optional[datetime]) -> datetime:
    """The earlier of the sender-claimed date and the receipt date.

    The sent date comes from the sender and can be forged; taking the minimum
    means a key update can never be dated later than its arrival.
    """
    dates = [d for d in (as_utc(sent_date), as_utc(internal_date)) if d is not None]
    if not dates:
        raise ValueError('a sent date or an internal date is required')
    return min(dates)


def build_peer_update(record: HeaderRecord, message_from_address: Optional[str],
                      sent_date: Optional[datetime], internal_date: Optional[datetime],
                      sink: Optional[Sink] = None) -> Optional[PeerUpdateRecord]:
    """Build the peer update, or return None if the header speaks for someone else."""
    sink = resolve(sink)
    if not message_from_address or record.address.lower() != message_from_address.lower():
        sink(RejectReason.ADDRESS_MISMATCH, f'header addr {record.address!r}, from {message_from_address!r}')
        return None

    return PeerUpdateRecord(
        peer_address=message_from_address,
        effective_date=effective_date(sent_date, internal_date),
        key_data=record.key_data,
        prefer_encrypt_mutual=record.prefer_encrypt_mutual,
    )
