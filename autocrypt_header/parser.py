"""Parse raw Autocrypt header values into validated records.

A header is accepted only when every rule passes:
- `type` absent or exactly "1"
- `key` present and valid base64
- `addr` present
- no unknown parameter without a leading underscore ("critical" parameters)

`prefer-encrypt=mutual` (any case) sets the preference flag; any other value is
ignored. Rejections go to a diagnostic sink, never raised.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional

from .diagnostics import RejectReason, Sink, resolve
from .parameters import decode_key_data, tokenize

PARAM_TYPE = 'type'
PARAM_KEY = 'key'
PARAM_ADDR = 'addr'
PARAM_PREFER_ENCRYPT = 'prefer-encrypt'

TYPE_1 = '1'
PREFER_ENCRYPT_MUTUAL = 'mutual'

KNOWN_PARAMS = frozenset((PARAM_TYPE, PARAM_KEY, PARAM_ADDR, PARAM_PREFER_ENCRYPT))


@dataclass(frozen=True)
class HeaderRecord:
    address: str
    key_data: bytes
    extension_parameters: Mapping[str, str] = field(default_factory=dict)
    prefer_encrypt_mutual: bool = False

    def __post_init__(self) -> None:
        if not self.address:
            raise ValueError('address cannot be empty')
        if not self.key_data:
            raise ValueError('key_data cannot be empty')
        bad = [name for name in self.extension_parameters if not name.startswith('_')]
        if bad:
            raise ValueError(f'extension parameters must start with "_": {bad}')
        object.__setattr__(self, 'extension_parameters',
                           MappingProxyType(dict(self.extension_parameters)))


@dataclass(frozen=True)
class ParseOutcome:
    """Either a record or the reason the header was rejected."""
    record: Optional[HeaderRecord] = None
    reason: Optional[RejectReason] = None
    detail: str = ''

    @property
    def ok(self) -> bool:
        return self.record is not None


def partition_parameters(params: Mapping[str, str]):
    """Split params into (known, extensions, critical) dicts without touching the input."""
    known, extensions, critical = {}, {}, {}
    for name, value in params.items():
        if name in KNOWN_PARAMS:
            known[name] = value
        elif name.startswith('_'):
            extensions[name] = value
        else:
            critical[name] = value
    return known, extensions, critical


def _reject(sink: Sink, reason: RejectReason, detail: str) -> ParseOutcome:
    sink(reason, detail)
    return ParseOutcome(reason=reason, detail=detail)


def parse_one(raw_header_value: str, sink: Optional[Sink] = None) -> ParseOutcome:
    """Parse a single Autocrypt header value."""
    sink = resolve(sink)
    known, extensions, critical = partition_parameters(tokenize(raw_header_value))

    header_type = known.get(PARAM_TYPE)
    if header_type is not None and header_type != TYPE_1:
        return _reject(sink, RejectReason.UNSUPPORTED_TYPE, header_type)

    base64_key_data = known.get(PARAM_KEY)
    if base64_key_data is None:
        return _reject(sink, RejectReason.MISSING_KEY, 'no key parameter')
    key_data = decode_key_data(base64_key_data)
    if key_data is None:
        return _reject(sink, RejectReason.INVALID_KEY, f'{len(base64_key_data)} chars')

    address = known.get(PARAM_ADDR)
    if not address:
        return _reject(sink, RejectReason.MISSING_ADDRESS, 'no addr parameter')

    prefer_encrypt = known.get(PARAM_PREFER_ENCRYPT)
    mutual = prefer_encrypt is not None and prefer_encrypt.lower() == PREFER_ENCRYPT_MUTUAL

    if critical:
        return _reject(sink, RejectReason.CRITICAL_PARAMETER, ', '.join(sorted(critical)))

    record = HeaderRecord(address=address, key_data=key_data,
                          extension_parameters=extensions, prefer_encrypt_mutual=mutual)
    return ParseOutcome(record=record)


def parse_all(raw_header_values: Iterable[str], sink: Optional[Sink] = None) -> List[HeaderRecord]:
    """Parse each value independently and return the valid records in order."""
    records = []
    for raw in raw_header_values:
        outcome = parse_one(raw, sink)
        if outcome.ok:
            records.append(outcome.record)
    return records
