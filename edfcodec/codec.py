"""
EDF writer and reader.

Writer: header -> data records -> byte sink.
Reader: byte source -> header -> allocated channels -> per-channel fill.
"""

import io
import logging
from typing import BinaryIO, List, Tuple, Union

from . import FIXED_HEADER_SIZE
from .errors import StructuralMismatch
from .fields import SIGNAL_HEADER_WIDTH
from .header import Header
from .records import encode_records, read_channel_blocks, channel_offset
from .signal import Signal, AnnotationSignal

# Module-level logger
_logger = logging.getLogger(__name__)

Channel = Union[Signal, AnnotationSignal]


def prepare_header(header: Header, channels: List[Channel]) -> Header:
    """
    Fill in the header fields derived from the channel list.

    signal_count, signals and header_size are recomputed; a non-zero
    signal_count that disagrees with the channels is rejected.
    """
    if header.signal_count not in (0, len(channels)):
        raise StructuralMismatch(
            f"header declares {header.signal_count} signals, {len(channels)} channels given"
        )
    if header.record_count < 0:
        raise StructuralMismatch(f"cannot write unknown record count {header.record_count}")

    for channel in channels:
        channel.check_fits(header.record_count)

    return header._replace(
        signal_count=len(channels),
        signals=tuple(channel.header for channel in channels),
        header_size=Header.size_for(len(channels)),
    )


def allocate_channels(header: Header) -> Tuple[List[Signal], List[AnnotationSignal]]:
    """
    Create empty channel objects for every header entry.

    Returns:
        (ordinary signals, annotation signals), each in header order
    """
    signals = []
    annotation_signals = []
    for index, signal_header in enumerate(header.signals):
        if signal_header.is_annotation:
            channel = AnnotationSignal(signal_header.sample_count_per_record, header=signal_header)
            annotation_signals.append(channel)
        else:
            channel = Signal(signal_header)
            signals.append(channel)
        channel.index = index
    return signals, annotation_signals


class Writer:
    """Encodes an EDF file model to a binary stream."""

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        self.stream.close()

    def write_edf(self, edf) -> int:
        """
        Write header and data records.

        Args:
            edf: Object with `header`, `signals` and `annotation_signals`;
                its header is replaced by the one actually written

        Returns:
            Number of bytes written
        """
        channels = list(edf.signals or []) + list(edf.annotation_signals or [])
        header = prepare_header(edf.header, channels)

        # Encode everything first so a failed pass writes nothing
        header_bytes = header.encode()
        _logger.debug(f"Writer position after header: {len(header_bytes)}")
        records = b"".join(encode_records(header.record_count, channels))
        edf.header = header

        written = self.stream.write(header_bytes + records)

        _logger.info(
            f"Wrote {header.record_count} records, {len(channels)} channels, {written} bytes"
        )
        return written


class Reader:
    """Decodes an EDF byte source, one channel at a time."""

    def __init__(self, source: Union[BinaryIO, bytes, bytearray]):
        """
        Initialize reader.

        Args:
            source: Seekable binary stream, or an in-memory buffer
        """
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(bytes(source))
        self.stream = source

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        self.stream.close()

    def _read_exact(self, size: int, what: str) -> bytes:
        data = self.stream.read(size)
        if len(data) != size:
            raise StructuralMismatch(f"{what} needs {size} bytes, got {len(data)}")
        return data

    def _available_records(self, header: Header) -> int:
        self.stream.seek(0, io.SEEK_END)
        available = self.stream.tell() - header.header_size
        if header.record_size <= 0:
            return 0
        return max(available, 0) // header.record_size

    def read_header(self) -> Header:
        """
        Read the general header, then signal_count entries of every column.

        Raises:
            StructuralMismatch: header bytes missing, or header size field wrong
        """
        self.stream.seek(0)
        header = Header.decode_fixed(self._read_exact(FIXED_HEADER_SIZE, "general header"))
        header = header.with_signals(
            self._read_exact(header.signal_count * SIGNAL_HEADER_WIDTH, "signal header")
        )

        if header.header_size != header.computed_size():
            raise StructuralMismatch(
                f"header size field is {header.header_size}, "
                f"{header.signal_count} signals need {header.computed_size()}"
            )

        if header.record_count < 0:
            record_count = self._available_records(header)
            _logger.info(f"Record count unknown, {record_count} records found in data")
            header = header._replace(record_count=record_count)

        _logger.debug(f"Reader position after header: {self.stream.tell()}")
        return header

    def allocate_signals(self, header: Header) -> Tuple[List[Signal], List[AnnotationSignal]]:
        return allocate_channels(header)

    def read_signal(self, header: Header, channel: Channel) -> Channel:
        """
        Fill one allocated channel from the data records.

        Args:
            header: Header returned by read_header
            channel: Channel returned by allocate_signals
        """
        index = getattr(channel, "index", None)
        if index is None or not 0 <= index < len(header.signals):
            raise StructuralMismatch(f"channel {channel.label!r} is not part of this header")

        blocks = read_channel_blocks(
            self.stream,
            data_start=header.header_size,
            record_count=header.record_count,
            stride=header.record_size,
            offset=channel_offset(header.signals, index),
            block_size=channel.block_size,
        )
        channel.decode_blocks(blocks)
        return channel

    def read_signals(self, header: Header) -> Tuple[List[Signal], List[AnnotationSignal]]:
        """Allocate and fill every channel."""
        signals, annotation_signals = self.allocate_signals(header)
        for channel in signals + annotation_signals:
            self.read_signal(header, channel)
        return signals, annotation_signals


def parse_header(data: bytes) -> Header:
    """Decode the header at the start of an in-memory EDF file."""
    return Reader(data).read_header()


def fill_channel(header: Header, channel: Channel, data: bytes) -> Channel:
    """Fill one allocated channel from an in-memory EDF file."""
    return Reader(data).read_signal(header, channel)


def encode_file(edf) -> bytes:
    """Encode an EDF file model to bytes."""
    buffer = io.BytesIO()
    Writer(buffer).write_edf(edf)
    return buffer.getvalue()
