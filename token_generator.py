"""Request signature ("tk" parameter) for the Google Translate web endpoint.

The web client signs every request with a short token computed from the text
and a seed value (``TKK``).  The endpoint rejects requests whose token does not
match, so the arithmetic below mirrors the browser script exactly, including
its 32-bit integer semantics.
"""

from __future__ import annotations

from typing import List, Tuple


DEFAULT_SEED = "0"

_FIRST_PASS = "+-a^+6"
_FINAL_PASS = "+-3^+b+-f"


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    if value & 0x80000000:
        return value - 0x100000000
    return value


def _transform(value: int, operations: str) -> int:
    """Apply a sequence of shift/add/xor steps encoded as three-character groups."""

    for index in range(0, len(operations) - 2, 3):
        amount_char = operations[index + 2]
        amount = ord(amount_char) - 87 if amount_char >= "a" else int(amount_char)
        if operations[index + 1] == "+":
            shifted = (value & 0xFFFFFFFF) >> amount
        else:
            shifted = _to_int32((value & 0xFFFFFFFF) << amount)
        if operations[index] == "+":
            value = _to_int32(value + shifted)
        else:
            value = _to_int32(value ^ shifted)
    return value


def _parse_seed(seed: str) -> Tuple[int, int]:
    parts = (seed or "").split(".")

    def _number(position: int) -> int:
        try:
            return int(parts[position])
        except (IndexError, ValueError):
            return 0

    return _number(0), _number(1)


def _utf16_units(text: str) -> List[int]:
    data = text.encode("utf-16-le", "surrogatepass")
    return [int.from_bytes(data[i : i + 2], "little") for i in range(0, len(data), 2)]


def _encode_units(units: List[int]) -> List[int]:
    # Same byte layout as the browser script: UTF-8, except that lone
    # surrogates are emitted as three-byte sequences.
    encoded: List[int] = []
    index = 0
    count = len(units)
    while index < count:
        code = units[index]
        if code < 0x80:
            encoded.append(code)
        else:
            if code < 0x800:
                encoded.append(code >> 6 | 0xC0)
            else:
                if (
                    code & 0xFC00 == 0xD800
                    and index + 1 < count
                    and units[index + 1] & 0xFC00 == 0xDC00
                ):
                    index += 1
                    code = 0x10000 + ((code & 0x3FF) << 10) + (units[index] & 0x3FF)
                    encoded.append(code >> 18 | 0xF0)
                    encoded.append(code >> 12 & 0x3F | 0x80)
                else:
                    encoded.append(code >> 12 | 0xE0)
                encoded.append(code >> 6 & 0x3F | 0x80)
            encoded.append(code & 0x3F | 0x80)
        index += 1
    return encoded


def generate_token(text: str, seed: str = DEFAULT_SEED) -> str:
    """Return the ``tk`` value the endpoint expects for ``text``.

    ``seed`` uses the ``"<int>.<int>"`` format of the web client's ``TKK``
    value; missing or non-numeric parts count as zero.
    """

    high, low = _parse_seed(seed)

    value = high
    for byte in _encode_units(_utf16_units(text)):
        value += byte
        value = _transform(value, _FIRST_PASS)
    value = _transform(value, _FINAL_PASS)
    value = _to_int32(value ^ low)
    if value < 0:
        value = (value & 0x7FFFFFFF) + 0x80000000
    value %= 1_000_000
    return f"{value}.{_to_int32(value ^ high)}"


__all__ = ["DEFAULT_SEED", "generate_token"]
