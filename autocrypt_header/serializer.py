"""Render an Autocrypt header for outgoing messages.

Output is `Autocrypt: addr=...;[prefer-encrypt=mutual;]key=...`, cut as a
whole, header name included, into fixed 76-character chunks. Every chunk,
the last one included, is followed by "\\n " and chunks ignore field
boundaries. Existing readers expect exactly this shape, trailing
continuation included.
"""
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import UnsupportedParametersError
from .parameters import encode_key_data
from .parser import PARAM_ADDR, PARAM_KEY, PARAM_PREFER_ENCRYPT, PREFER_ENCRYPT_MUTUAL

HEADER_NAME = 'Autocrypt'
HEADER_PREFIX = f'{HEADER_NAME}: '
LINE_WIDTH = 76
CONTINUATION = '\n '


@dataclass(frozen=True)
class PreconditionViolation:
    message: str
    parameters: Mapping[str, str]


@dataclass(frozen=True)
class SerializeOutcome:
    """Folded header text, or the precondition the caller broke."""
    text: Optional[str] = None
    violation: Optional[PreconditionViolation] = None

    @property
    def ok(self) -> bool:
        return self.violation is None

    @property
    def header_value(self) -> Optional[str]:
        """The folded text without the leading header name."""
        if self.text is None:
            return None
        return self.text[len(HEADER_PREFIX):]

    def unwrap(self) -> str:
        """Return the full header text, raising if serialization was refused."""
        if self.violation is not None:
            raise UnsupportedParametersError(dict(self.violation.parameters))
        return self.text


def unfolded_value(address: str, key_data: bytes, prefer_encrypt_mutual: bool) -> str:
    value = f'{PARAM_ADDR}={address};'
    if prefer_encrypt_mutual:
        value += f'{PARAM_PREFER_ENCRYPT}={PREFER_ENCRYPT_MUTUAL};'
    value += f'{PARAM_KEY}={encode_key_data(key_data)}'
    return value


def fold(value: str, width: int = LINE_WIDTH) -> str:
    return ''.join(value[i:i + width] + CONTINUATION for i in range(0, len(value), width))


def serialize(address: str, key_data: bytes, prefer_encrypt_mutual: bool = False,
              extension_parameters: Optional[Mapping[str, str]] = None) -> SerializeOutcome:
    if extension_parameters:
        return SerializeOutcome(violation=PreconditionViolation(
            'arbitrary parameters not supported', dict(extension_parameters)))
    return SerializeOutcome(text=fold(HEADER_PREFIX + unfolded_value(address, key_data, prefer_encrypt_mutual)))
