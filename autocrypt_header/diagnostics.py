"""Reject reasons and the sinks that receive them.

Parsing and building never log directly; they hand each rejection to a sink,
a plain callable `sink(reason, detail)`. The default forwards to logging.
"""
import enum
import logging
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger('autocrypt_header')


class RejectReason(enum.Enum):
    UNSUPPORTED_TYPE = 'unsupported type parameter'
    MISSING_KEY = 'missing key parameter'
    INVALID_KEY = 'error parsing base64 key data'
    MISSING_ADDRESS = 'missing addr parameter'
    CRITICAL_PARAMETER = 'unknown critical parameter'
    AMBIGUOUS = 'more than one valid header'
    NO_VALID_HEADER = 'no valid header'
    ADDRESS_MISMATCH = 'address mismatch'


Sink = Callable[[RejectReason, str], None]

_LEVELS = {
    RejectReason.NO_VALID_HEADER: logging.DEBUG,
    RejectReason.AMBIGUOUS: logging.WARNING,
}


def logging_sink(reason: RejectReason, detail: str) -> None:
    """Default sink: log the rejection on the package logger."""
    logger.log(_LEVELS.get(reason, logging.ERROR), 'autocrypt: %s (%s)', reason.value, detail)


class CollectingSink:
    """Sink that keeps every (reason, detail) it receives, optionally forwarding."""

    def __init__(self, forward: Optional[Sink] = None):
        self.entries: List[Tuple[RejectReason, str]] = []
        self._forward = forward

    def __call__(self, reason: RejectReason, detail: str) -> None:
        self.entries.append((reason, detail))
        if self._forward is not None:
            self._forward(reason, detail)

    @property
    def reasons(self) -> List[RejectReason]:
        return [reason for reason, _ in self.entries]


def resolve(sink: Optional[Sink]) -> Sink:
    return logging_sink if sink is None else sink
