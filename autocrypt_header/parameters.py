"""Split raw Autocrypt header values into parameters and handle key encoding.

Header values look like `addr=a@b.com; prefer-encrypt=mutual; key=...`.
Folds are undone first by dropping each line break together with the single
space or tab that marks the continuation, so a fold may fall anywhere, even
inside a value. Names and values are then trimmed; inner whitespace is kept.
"""
import base64
import binascii
import re

_CONTINUATION = re.compile(r'\r?\n[ \t]')
_WHITESPACE = re.compile(r'\s+')


def unfold(raw_value: str) -> str:
    """Remove folded line breaks and their continuation marker."""
    return _CONTINUATION.sub('', raw_value or '')


def tokenize(raw_value: str) -> dict:
    """Return a dict of lower-cased parameter name -> value.

    Chunks without '=' are ignored. A repeated name keeps the last value.
    """
    params = {}
    for chunk in unfold(raw_value).split(';'):
        parts = chunk.split('=', 1)
        if len(parts) < 2:
            continue
        name, value = parts[0].strip(), parts[1].strip()
        if not name:
            continue
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]
        params[name.lower()] = value
    return params


def decode_key_data(text: str):
    """Decode standard base64 key data. Returns bytes, or None if invalid or empty.

    Whitespace is not part of the base64 alphabet, so any left over from
    unusual folding is dropped before decoding.
    """
    try:
        data = base64.b64decode(_WHITESPACE.sub('', text), validate=True)
    except (binascii.Error, ValueError):
        return None
    return data or None


def encode_key_data(data: bytes) -> str:
    return base64.b64encode(data).decode('ascii')
