"""Pick the single usable Autocrypt header out of all instances on a message."""
from typing import Iterable, Optional

from .diagnostics import RejectReason, Sink, resolve
from .parser import HeaderRecord, parse_all


def select_valid(raw_header_values: Iterable[str], sink: Optional[Sink] = None) -> Optional[HeaderRecord]:
    """Return the record iff exactly one header parses; otherwise None.

    Two or more valid headers are not resolved. The message is treated as if
    it had no usable header, and the sink sees AMBIGUOUS so duplicated or
    injected headers still show up in diagnostics.
    """
    sink = resolve(sink)
    values = list(raw_header_values)
    records = parse_all(values, sink)

    if len(records) == 1:
        return records[0]
    if records:
        sink(RejectReason.AMBIGUOUS, f'{len(records)} valid of {len(values)} headers')
    elif values:
        sink(RejectReason.NO_VALID_HEADER, f'0 valid of {len(values)} headers')
    return None
