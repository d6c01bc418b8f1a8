"""Message-level Autocrypt operations: read incoming headers, stamp outgoing ones."""
import logging
from typing import Optional

from .diagnostics import Sink
from .message import MessageAccessor
from .peer_update import PeerUpdateRecord, build_peer_update
from .parser import HeaderRecord
from .provider import Observer
from .selector import select_valid
from .serializer import HEADER_NAME, serialize

logger = logging.getLogger(__name__)


def has_autocrypt_header(message: MessageAccessor) -> bool:
    return len(message.get_header_values(HEADER_NAME)) > 0


def get_valid_autocrypt_header(message: MessageAccessor, sink: Optional[Sink] = None) -> Optional[HeaderRecord]:
    return select_valid(message.get_header_values(HEADER_NAME), sink)


def peer_update_if_present(message: MessageAccessor, sink: Optional[Sink] = None) -> Optional[PeerUpdateRecord]:
    """Return the peer update carried by the message, if it has a usable header."""
    record = get_valid_autocrypt_header(message, sink)
    if record is None:
        return None
    sent_date, internal_date = message.get_sent_date(), message.get_internal_date()
    if sent_date is None and internal_date is None:
        logger.warning('autocrypt: message has neither a Date nor a receipt date, skipping update')
        return None
    return build_peer_update(record, message.get_from_address(), sent_date, internal_date, sink)


def process_cleartext_message_async(provider, message: MessageAccessor,
                                    on_success: Optional[Observer] = None, sink: Optional[Sink] = None) -> bool:
    """Submit the message's peer update, if any. Does not wait for the provider."""
    update = peer_update_if_present(message, sink)
    if update is None:
        return False
    provider.submit_peer_update(update, on_success)
    return True


def add_autocrypt_header_to_message(message: MessageAccessor, key_data: bytes, address: str,
                                    prefer_encrypt_mutual: bool = False) -> str:
    outcome = serialize(address, key_data, prefer_encrypt_mutual)
    outcome.unwrap()
    message.append_raw_header(HEADER_NAME, outcome.header_value)
    logger.debug('added Autocrypt header for %s', address)
    return outcome.text
