"""
Fixed-width ASCII field codec.

Every EDF header value lives in a named slot whose byte width is fixed by
the format. Both directions consult the same slot tables below, so field
offsets cannot drift between the writer and the reader.
"""

import math
from typing import NamedTuple, Union

from . import HEADER_ENCODING, MAX_FRACTION_DIGITS
from .errors import FormatViolation

Number = Union[int, float]


class Slot(NamedTuple):
    """A named header field: byte width and Python value type."""

    name: str
    width: int
    kind: type


# General header, bytes [0, 256)
HEADER_SLOTS = (
    Slot("version", 8, str),
    Slot("patient_id", 80, str),
    Slot("record_id", 80, str),
    Slot("start_date", 8, str),
    Slot("start_time", 8, str),
    Slot("header_size", 8, int),
    Slot("reserved", 44, str),
    Slot("record_count", 8, int),
    Slot("record_duration", 8, float),
    Slot("signal_count", 4, int),
)

# Per-signal columns, each repeated signal_count times
SIGNAL_SLOTS = (
    Slot("label", 16, str),
    Slot("transducer_type", 80, str),
    Slot("physical_dimension", 8, str),
    Slot("physical_minimum", 8, float),
    Slot("physical_maximum", 8, float),
    Slot("digital_minimum", 8, int),
    Slot("digital_maximum", 8, int),
    Slot("prefiltering", 80, str),
    Slot("sample_count_per_record", 8, int),
    Slot("reserved", 32, str),
)

SIGNAL_HEADER_WIDTH = sum(slot.width for slot in SIGNAL_SLOTS)  # = 256


def format_number(value: Number) -> str:
    """
    Format a number the "0.###" way.

    Integers are written as-is. Reals get at most MAX_FRACTION_DIGITS
    fractional digits with trailing zeros (and a bare point) dropped.

    Raises:
        ValueError: for NaN or infinity
    """
    if isinstance(value, int):
        return str(value)

    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"cannot format non-finite number {value!r}")

    text = f"{value:.{MAX_FRACTION_DIGITS}f}".rstrip("0").rstrip(".")
    if text == "-0":
        text = "0"
    return text


def _coerce(slot: Slot, value) -> Number:
    """Convert value to the slot's numeric type without losing information."""
    if isinstance(value, int) and slot.kind is int:
        return value

    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise FormatViolation(f"{slot.name}: {value!r} is not a number", field=slot.name) from e

    if slot.kind is int:
        if not number.is_integer():
            raise FormatViolation(f"{slot.name}: {value!r} is not an integer", field=slot.name)
        return int(number)
    return number


def encode_field(slot: Slot, value) -> bytes:
    """
    Encode a value into exactly slot.width bytes.

    Strings longer than the slot are truncated; numbers whose text does
    not fit raise FormatViolation.

    Args:
        slot: Target field slot
        value: str for text slots, int/float for numeric slots

    Returns:
        ASCII bytes, right-padded with spaces
    """
    if slot.kind is str:
        text = "" if value is None else str(value)
        text = text[:slot.width]
    else:
        try:
            text = format_number(_coerce(slot, value))
        except FormatViolation:
            raise
        except ValueError as e:
            raise FormatViolation(f"{slot.name}: {e}", field=slot.name) from e

        if len(text) > slot.width:
            raise FormatViolation(
                f"{slot.name}: {text!r} does not fit in {slot.width} bytes",
                field=slot.name,
            )

    try:
        data = text.encode(HEADER_ENCODING)
    except UnicodeEncodeError as e:
        raise FormatViolation(
            f"{slot.name}: {text!r} is not {HEADER_ENCODING}", field=slot.name
        ) from e

    return data.ljust(slot.width, b" ")


def decode_field(slot: Slot, raw: bytes):
    """
    Decode slot.width bytes back into the slot's value type.

    Blank fields decode to the empty/zero value of the slot type.
    """
    if len(raw) != slot.width:
        raise FormatViolation(
            f"{slot.name}: expected {slot.width} bytes, got {len(raw)}", field=slot.name
        )

    try:
        text = raw.decode(HEADER_ENCODING)
    except UnicodeDecodeError as e:
        raise FormatViolation(f"{slot.name}: {raw!r} is not {HEADER_ENCODING}", field=slot.name) from e

    if slot.kind is str:
        return text.rstrip(" ")

    text = text.strip()
    if not text:
        return slot.kind()

    try:
        if slot.kind is int:
            try:
                return int(text)
            except ValueError:
                number = float(text)
                if not number.is_integer():
                    raise
                return int(number)
        return float(text)
    except ValueError as e:
        raise FormatViolation(f"{slot.name}: cannot parse {text!r}", field=slot.name) from e
