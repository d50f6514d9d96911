"""
Data record layout.

The data section is record_count repetitions of one block per channel,
in header order. Ordinary channels contribute sample_count_per_record
little-endian int16 values. Annotation channels contribute a fixed-size
block: record-index marker, optional TAL, zero padding.
"""

import logging
from typing import BinaryIO, Iterator, List, Optional, Sequence

from . import SAMPLE_WIDTH, TAL_SEPARATOR, TAL_TERMINATOR
from .errors import FormatViolation, LayoutOverflow
from .header import SignalHeader
from .tal import TAL

# Module-level logger
_logger = logging.getLogger(__name__)


def record_index_marker(index: int) -> bytes:
    """
    Encode the marker that opens every annotation block.

    The decimal index is split before its last digit: 7 -> "+0.7",
    23 -> "+2.3", 105 -> "+10.5". Followed by 0x14 0x14 0x00.
    """
    if index < 0:
        raise ValueError("record index must be non-negative")

    digits = str(index)
    left = digits[:-1] if len(digits) > 1 else "0"
    right = digits[-1]

    result = bytearray(f"+{left}.{right}".encode("ascii"))
    result.append(TAL_SEPARATOR)
    result.append(TAL_SEPARATOR)
    result.append(TAL_TERMINATOR)
    return bytes(result)


def encode_annotation_block(
    index: int,
    annotations: Sequence[Optional[TAL]],
    sample_count_per_record: int,
) -> bytes:
    """
    Encode one record's annotation block.

    Args:
        index: Record index (selects annotations[index] and the marker)
        annotations: Per-record TALs; None or a short sequence means marker only
        sample_count_per_record: Block budget in 2-byte samples

    Returns:
        Exactly sample_count_per_record * 2 bytes

    Raises:
        LayoutOverflow: marker plus TAL do not fit the block
    """
    content = record_index_marker(index)
    if index < len(annotations) and annotations[index] is not None:
        content += annotations[index].encode()

    block_size = sample_count_per_record * SAMPLE_WIDTH
    if len(content) > block_size:
        raise LayoutOverflow(
            f"record {index}: annotation needs {len(content)} bytes, "
            f"block holds {block_size} ({sample_count_per_record} samples)",
            record_index=index,
            size=len(content),
            budget=block_size,
        )

    return content.ljust(block_size, bytes([TAL_TERMINATOR]))


def split_tals(block: bytes, partial: bool = False) -> List[TAL]:
    """
    Decode every NUL-terminated TAL in a block, skipping zero padding.

    Args:
        block: Annotation block bytes
        partial: Block was cut short by end of file; an unterminated
            trailing fragment is dropped instead of rejected
    """
    tals = []
    position = 0
    while position < len(block):
        if block[position] == TAL_TERMINATOR:
            position += 1
            continue

        end = block.find(TAL_TERMINATOR, position)
        if end < 0:
            if partial:
                _logger.warning(f"Dropping unterminated annotation fragment at byte {position}")
                break
            raise FormatViolation(f"annotation block has unterminated TAL at byte {position}")

        tals.append(TAL.decode(block[position:end + 1]))
        position = end + 1

    return tals


def decode_annotation_block(
    block: bytes,
    index: Optional[int] = None,
    partial: bool = False,
) -> Optional[TAL]:
    """
    Decode one record's annotation block.

    The first TAL is the record-index marker and is discarded.

    Args:
        block: Annotation block bytes
        index: Expected record index, only used for diagnostics
        partial: Block was cut short by end of file

    Returns:
        The record's annotation, or None for a marker-only block
    """
    if index is not None and not block.startswith(record_index_marker(index)):
        _logger.debug(f"Record {index}: annotation block does not open with the expected marker")

    tals = split_tals(block, partial=partial)
    if not tals:
        _logger.debug(f"Record {index}: annotation block is empty")
        return None

    entries = tals[1:]
    if len(entries) > 1:
        _logger.warning(f"Record {index}: keeping first of {len(entries)} annotations")
    return entries[0] if entries else None


def record_size(headers: Sequence[SignalHeader]) -> int:
    """Bytes per data record."""
    return sum(h.block_size for h in headers)


def channel_offset(headers: Sequence[SignalHeader], index: int) -> int:
    """Byte offset of channel `index` inside each data record."""
    return sum(h.block_size for h in headers[:index])


def encode_records(record_count: int, channels: Sequence) -> Iterator[bytes]:
    """
    Yield the data records one at a time.

    Args:
        record_count: Number of records to emit
        channels: Signal / AnnotationSignal objects in header order
    """
    for record_index in range(record_count):
        yield b"".join(channel.encode_block(record_index) for channel in channels)


def read_channel_blocks(
    stream: BinaryIO,
    data_start: int,
    record_count: int,
    stride: int,
    offset: int,
    block_size: int,
) -> List[bytes]:
    """
    Read one channel's block from every data record.

    Reading stops at end of data; a final short block is returned as-is.

    Args:
        stream: Seekable byte source
        data_start: Byte position of the first record (header size)
        record_count: Records declared in the header
        stride: Bytes per record
        offset: Channel offset inside a record
        block_size: Channel bytes per record
    """
    blocks = []
    for record_index in range(record_count):
        stream.seek(data_start + record_index * stride + offset)
        block = stream.read(block_size)
        if not block:
            _logger.warning(
                f"Data ends before record {record_index} of {record_count}"
            )
            break
        blocks.append(block)
        if len(block) < block_size:
            _logger.warning(
                f"Record {record_index} truncated: {len(block)} of {block_size} bytes"
            )
            break
    return blocks
