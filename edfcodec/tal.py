"""
Time-stamped Annotation List (TAL) value and its byte format.

Encoded form (EDF+ section 2.2.2):

    +onset [0x15 duration] 0x14 text 0x14 0x00

Onset always carries an explicit sign. A negative duration_seconds means
"no duration" and is encoded by leaving out the 0x15 segment.
"""

from typing import NamedTuple, Optional

from . import HEADER_ENCODING, TAL_ENCODING, TAL_DURATION_MARK, TAL_SEPARATOR, TAL_TERMINATOR
from .errors import FormatViolation
from .fields import format_number

_RESERVED_BYTES = (chr(TAL_DURATION_MARK), chr(TAL_SEPARATOR), chr(TAL_TERMINATOR))


class TAL(NamedTuple):
    """A single annotation: onset, optional duration and text."""

    start_seconds: float
    duration_seconds: float = -1.0
    description: str = ""

    @property
    def has_duration(self) -> bool:
        return self.duration_seconds >= 0

    @property
    def start_string(self) -> str:
        sign = "-" if self.start_seconds < 0 else "+"
        return sign + format_number(abs(float(self.start_seconds)))

    @property
    def duration_string(self) -> Optional[str]:
        if not self.has_duration:
            return None
        return format_number(float(self.duration_seconds))

    def encode(self) -> bytes:
        """
        Encode to TAL bytes, terminator included.

        Raises:
            FormatViolation: non-finite times, or text containing a separator byte
        """
        for reserved in _RESERVED_BYTES:
            if reserved in self.description:
                raise FormatViolation(
                    f"annotation text {self.description!r} contains separator byte "
                    f"0x{ord(reserved):02x}",
                    field="description",
                )

        try:
            onset = self.start_string.encode(HEADER_ENCODING)
            duration = self.duration_string
        except ValueError as e:
            raise FormatViolation(f"annotation time: {e}", field="start_seconds") from e

        result = bytearray(onset)
        if duration is not None:
            result.append(TAL_DURATION_MARK)
            result.extend(duration.encode(HEADER_ENCODING))
        result.append(TAL_SEPARATOR)
        result.extend(self.description.encode(TAL_ENCODING))
        result.append(TAL_SEPARATOR)
        result.append(TAL_TERMINATOR)
        return bytes(result)

    @classmethod
    def decode(cls, data: bytes) -> "TAL":
        """
        Decode one TAL.

        Args:
            data: bytes starting at the onset sign; anything after the
                first 0x00 terminator is ignored

        Returns:
            TAL with duration_seconds = -1.0 when no duration is present
        """
        end = data.find(TAL_TERMINATOR)
        if end < 0:
            raise FormatViolation("TAL is missing its 0x00 terminator")

        span = data[:end]
        first_separator = span.find(TAL_SEPARATOR)
        if first_separator < 0 or span[-1] != TAL_SEPARATOR:
            raise FormatViolation(f"TAL {span!r} is missing a 0x14 separator")

        timing = span[:first_separator]
        description = span[first_separator + 1:-1]

        mark = timing.find(TAL_DURATION_MARK)
        if mark >= 0:
            onset_text, duration_text = timing[:mark], timing[mark + 1:]
        else:
            onset_text, duration_text = timing, None

        start = _parse_seconds(onset_text, signed=True)
        duration = -1.0 if duration_text is None else _parse_seconds(duration_text, signed=False)

        try:
            text = description.decode(TAL_ENCODING)
        except UnicodeDecodeError as e:
            raise FormatViolation(f"TAL text {description!r} is not {TAL_ENCODING}", field="description") from e

        return cls(start, duration, text)


def _parse_seconds(raw: bytes, signed: bool) -> float:
    field = "start_seconds" if signed else "duration_seconds"
    try:
        text = raw.decode(HEADER_ENCODING)
    except UnicodeDecodeError as e:
        raise FormatViolation(f"TAL time {raw!r} is not {HEADER_ENCODING}", field=field) from e

    has_sign = text[:1] in ("+", "-")
    if signed and not has_sign:
        raise FormatViolation(f"TAL onset {text!r} has no sign", field=field)
    if not signed and has_sign:
        raise FormatViolation(f"TAL duration {text!r} must be unsigned", field=field)

    try:
        return float(text)
    except ValueError as e:
        raise FormatViolation(f"TAL time {text!r} is not a number", field=field) from e
