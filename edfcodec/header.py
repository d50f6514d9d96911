"""
EDF header model: the 256-byte general header plus one column block per
signal slot.
"""

import datetime
import logging
from typing import NamedTuple, Optional, Tuple

from . import (
    FIXED_HEADER_SIZE,
    SAMPLE_WIDTH,
    ANNOTATION_LABEL,
    ANNOTATION_DIGITAL_MIN,
    ANNOTATION_DIGITAL_MAX,
    ANNOTATION_PHYSICAL_MIN,
    ANNOTATION_PHYSICAL_MAX,
)
from .errors import FormatViolation, StructuralMismatch
from .fields import HEADER_SLOTS, SIGNAL_SLOTS, SIGNAL_HEADER_WIDTH, encode_field, decode_field

# Module-level logger
_logger = logging.getLogger(__name__)

# EDF clipping date: two-digit years 85-99 are 19xx, 00-84 are 20xx
_CLIPPING_YEAR = 85


class SignalHeader(NamedTuple):
    """
    Header fields of one channel (one entry in each per-signal column).

    Shared by ordinary and annotation channels.
    """

    label: str = ""
    transducer_type: str = ""
    physical_dimension: str = ""
    physical_minimum: float = 0.0
    physical_maximum: float = 0.0
    digital_minimum: int = 0
    digital_maximum: int = 0
    prefiltering: str = ""
    sample_count_per_record: int = 0
    reserved: str = ""

    @property
    def is_annotation(self) -> bool:
        return self.label.strip() == ANNOTATION_LABEL

    @property
    def block_size(self) -> int:
        """Bytes this channel occupies in every data record."""
        return self.sample_count_per_record * SAMPLE_WIDTH

    def scale_factor(self) -> float:
        """
        Digital-to-physical gain: (pmax - pmin) / (dmax - dmin).

        Raises:
            FormatViolation: if either range is empty
        """
        if self.physical_maximum == self.physical_minimum:
            raise FormatViolation(
                f"signal {self.label!r}: physical minimum equals physical maximum",
                field="physical_maximum",
            )
        if self.digital_maximum == self.digital_minimum:
            raise FormatViolation(
                f"signal {self.label!r}: digital minimum equals digital maximum",
                field="digital_maximum",
            )
        return (self.physical_maximum - self.physical_minimum) / (
            self.digital_maximum - self.digital_minimum
        )

    def encode_column(self, slot_name: str) -> bytes:
        """Encode this channel's entry for one per-signal column."""
        slot = next(s for s in SIGNAL_SLOTS if s.name == slot_name)
        value = getattr(self, slot_name)
        try:
            return encode_field(slot, value)
        except FormatViolation as e:
            raise FormatViolation(f"signal {self.label!r}: {e}", field=slot_name) from e


def annotation_signal_header(sample_count_per_record: int) -> SignalHeader:
    """
    Build the header of an "EDF Annotations" channel.

    Digital range is fixed to -32768..32767, physical range to -1..1 and
    every text field except the label is blank (EDF+ section 2.2.1).
    """
    if sample_count_per_record <= 0:
        raise ValueError("annotation channel needs a positive sample count per record")

    return SignalHeader(
        label=ANNOTATION_LABEL,
        physical_minimum=ANNOTATION_PHYSICAL_MIN,
        physical_maximum=ANNOTATION_PHYSICAL_MAX,
        digital_minimum=ANNOTATION_DIGITAL_MIN,
        digital_maximum=ANNOTATION_DIGITAL_MAX,
        sample_count_per_record=sample_count_per_record,
    )


class Header(NamedTuple):
    """
    Complete file header.

    Fixed block (10 slots, 256 bytes) followed by signal_count entries in
    each of the 10 per-signal columns. `signals` lists ordinary channels
    first, annotation channels after them.
    """

    version: str = "0"
    patient_id: str = ""
    record_id: str = ""
    start_date: str = "01.01.85"
    start_time: str = "00.00.00"
    header_size: int = 0
    reserved: str = ""
    record_count: int = 0
    record_duration: float = 1.0
    signal_count: int = 0
    signals: Tuple[SignalHeader, ...] = ()

    @staticmethod
    def size_for(signal_count: int) -> int:
        """Header size in bytes for a given number of channels."""
        return FIXED_HEADER_SIZE + signal_count * SIGNAL_HEADER_WIDTH

    def computed_size(self) -> int:
        return self.size_for(self.signal_count)

    @property
    def record_size(self) -> int:
        """Bytes per data record."""
        return sum(s.block_size for s in self.signals)

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def encode_fixed(self) -> bytes:
        """Encode the 256-byte general header."""
        return b"".join(encode_field(slot, getattr(self, slot.name)) for slot in HEADER_SLOTS)

    def encode_signals(self) -> bytes:
        """Encode the per-signal columns, one slot at a time."""
        if len(self.signals) != self.signal_count:
            raise StructuralMismatch(
                f"header declares {self.signal_count} signals, {len(self.signals)} present"
            )
        return b"".join(
            signal.encode_column(slot.name)
            for slot in SIGNAL_SLOTS
            for signal in self.signals
        )

    def encode(self) -> bytes:
        return self.encode_fixed() + self.encode_signals()

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    @classmethod
    def decode_fixed(cls, data: bytes) -> "Header":
        """
        Decode the general header.

        Args:
            data: at least FIXED_HEADER_SIZE bytes

        Returns:
            Header without signal entries
        """
        if len(data) < FIXED_HEADER_SIZE:
            raise StructuralMismatch(
                f"general header needs {FIXED_HEADER_SIZE} bytes, got {len(data)}"
            )

        values = {}
        offset = 0
        for slot in HEADER_SLOTS:
            values[slot.name] = decode_field(slot, data[offset:offset + slot.width])
            offset += slot.width

        if values["signal_count"] < 0:
            raise FormatViolation(
                f"negative signal count {values['signal_count']}", field="signal_count"
            )
        return cls(**values)

    def with_signals(self, data: bytes) -> "Header":
        """
        Decode the per-signal columns that follow the general header.

        Args:
            data: signal_count * 256 bytes

        Returns:
            Copy of this header with `signals` populated
        """
        count = self.signal_count
        expected = count * SIGNAL_HEADER_WIDTH
        if len(data) < expected:
            raise StructuralMismatch(
                f"signal header columns need {expected} bytes, got {len(data)}"
            )

        columns = {}
        offset = 0
        for slot in SIGNAL_SLOTS:
            columns[slot.name] = [
                decode_field(slot, data[offset + i * slot.width:offset + (i + 1) * slot.width])
                for i in range(count)
            ]
            offset += count * slot.width

        signals = tuple(
            SignalHeader(**{name: column[i] for name, column in columns.items()})
            for i in range(count)
        )
        return self._replace(signals=signals)

    @classmethod
    def decode(cls, data: bytes) -> "Header":
        """Decode a complete header from the start of `data`."""
        header = cls.decode_fixed(data)
        end = header.computed_size()
        header = header.with_signals(data[FIXED_HEADER_SIZE:end])
        _logger.debug(f"Decoded header: {header.signal_count} signals, {header.record_count} records")
        return header

    # ------------------------------------------------------------------
    # Start date/time
    # ------------------------------------------------------------------

    @property
    def start_datetime(self) -> Optional[datetime.datetime]:
        """
        Recording start from the dd.mm.yy / hh.mm.ss fields.

        Returns None when the fields are blank.
        """
        if not self.start_date.strip() or not self.start_time.strip():
            return None

        try:
            day, month, year = (int(part) for part in self.start_date.split("."))
            hour, minute, second = (int(part) for part in self.start_time.split("."))
            year += 1900 if year >= _CLIPPING_YEAR else 2000
            return datetime.datetime(year, month, day, hour, minute, second)
        except ValueError as e:
            raise FormatViolation(
                f"invalid start date/time {self.start_date!r} {self.start_time!r}",
                field="start_date",
            ) from e

    def with_start_datetime(self, start: datetime.datetime) -> "Header":
        """Return a copy with start_date and start_time set from `start`."""
        return self._replace(
            start_date=start.strftime("%d.%m.%y"),
            start_time=start.strftime("%H.%M.%S"),
        )
