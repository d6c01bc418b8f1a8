"""Read and extend email messages for Autocrypt processing.

Messages are parsed with the compat32 policy so header values come back
exactly as they appear on the wire, folding included.
"""
import logging
from datetime import datetime
from email import policy
from email.message import Message
from email.parser import BytesParser, Parser
from email.utils import getaddresses, parsedate_to_datetime
from typing import List, Optional

from .peer_update import as_utc

logger = logging.getLogger(__name__)


def _parse_date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return as_utc(parsedate_to_datetime(value.strip()))
    except (TypeError, ValueError, IndexError):
        logger.debug('unparseable date %r', value)
        return None


def received_date(received_headers: List[str]) -> Optional[datetime]:
    """Date stamped by the newest Received header (the part after the last ';')."""
    if not received_headers:
        return None
    newest = received_headers[0]
    if ';' not in newest:
        return None
    return _parse_date(' '.join(newest.rsplit(';', 1)[1].split()))


class MessageAccessor:
    """Header, sender and date access over an email.message.Message."""

    def __init__(self, message: Message, internal_date: Optional[datetime] = None):
        self.message = message
        self._internal_date = as_utc(internal_date)

    @classmethod
    def from_string(cls, text: str, internal_date: Optional[datetime] = None) -> 'MessageAccessor':
        return cls(Parser(policy=policy.compat32).parsestr(text), internal_date)

    @classmethod
    def from_bytes(cls, data: bytes, internal_date: Optional[datetime] = None) -> 'MessageAccessor':
        return cls(BytesParser(policy=policy.compat32).parsebytes(data), internal_date)

    @classmethod
    def from_file(cls, path, internal_date: Optional[datetime] = None) -> 'MessageAccessor':
        with open(path, 'rb') as f:
            return cls.from_bytes(f.read(), internal_date)

    def get_header_values(self, name: str) -> List[str]:
        return [str(v) for v in self.message.get_all(name, [])]

    def get_from_address(self) -> Optional[str]:
        addresses = [addr for _, addr in getaddresses(self.get_header_values('From')) if addr]
        return addresses[0] if addresses else None

    def get_sent_date(self) -> Optional[datetime]:
        return _parse_date(self.message.get('Date'))

    def get_internal_date(self) -> Optional[datetime]:
        """Receipt time: the explicit value if given, else the newest Received stamp."""
        if self._internal_date is not None:
            return self._internal_date
        return received_date(self.get_header_values('Received'))

    def append_raw_header(self, name: str, value: str) -> None:
        """Append a header as-is; the value is expected to be folded already."""
        self.message[name] = value

    def as_string(self) -> str:
        # max_line_length=0 keeps the generator from refolding raw headers
        return self.message.as_string(policy=self.message.policy.clone(max_line_length=0))
