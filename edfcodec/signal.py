"""
Channel variants.

Signal and AnnotationSignal share a SignalHeader and the same record
block capability (block_size, encode_block, decode_blocks, check_fits).
They differ only in what a block holds.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np

from . import SAMPLE_WIDTH, SAMPLE_MIN, SAMPLE_MAX
from .errors import StructuralMismatch
from .header import SignalHeader, annotation_signal_header
from .records import encode_annotation_block, decode_annotation_block
from .tal import TAL

# Module-level logger
_logger = logging.getLogger(__name__)

# On-disk sample type
SAMPLE_DTYPE = np.dtype("<i2")


class Signal:
    """
    Ordinary channel: header fields plus int16 samples.

    Samples are stored record after record; the total length is normally
    sample_count_per_record * record_count.
    """

    is_annotation = False

    def __init__(self, header: SignalHeader, samples=None):
        """
        Initialize a signal.

        Args:
            header: Channel header fields
            samples: Digital sample values (-32768 to 32767)
        """
        if header.sample_count_per_record < 0:
            raise ValueError("sample_count_per_record must be non-negative")

        self.header = header
        self.samples = samples
        self.index: Optional[int] = None  # position in the file header

    @property
    def samples(self) -> np.ndarray:
        return self._samples

    @samples.setter
    def samples(self, values):
        array = np.asarray([] if values is None else values)
        if array.ndim != 1:
            raise ValueError("samples must be one-dimensional")
        if array.size:
            if array.dtype.kind == "f" and not np.all(np.mod(array, 1) == 0):
                raise ValueError("samples must be integers")
            if array.min() < SAMPLE_MIN or array.max() > SAMPLE_MAX:
                raise ValueError("samples must be signed 16-bit")
        self._samples = array.astype(np.int16)

    @property
    def label(self) -> str:
        return self.header.label

    @property
    def sample_count_per_record(self) -> int:
        return self.header.sample_count_per_record

    @property
    def block_size(self) -> int:
        return self.header.block_size

    def scale_factor(self) -> float:
        return self.header.scale_factor()

    def check_fits(self, record_count: int):
        """
        Raise StructuralMismatch unless samples fill record_count records.

        Only the final record may be short; a short window anywhere else
        would shift every later record.
        """
        capacity = record_count * self.sample_count_per_record
        if len(self._samples) > capacity:
            raise StructuralMismatch(
                f"signal {self.label!r} has {len(self._samples)} samples, "
                f"{record_count} records hold {capacity}",
                signal=self.label,
            )

        required = max(record_count - 1, 0) * self.sample_count_per_record
        if len(self._samples) < required:
            raise StructuralMismatch(
                f"signal {self.label!r} has {len(self._samples)} samples, "
                f"{record_count} records need at least {required}",
                signal=self.label,
            )

    def encode_block(self, record_index: int) -> bytes:
        """
        Encode this signal's sample window for one record.

        The window is clamped to the available samples, so an under-run
        yields a short (possibly empty) block.
        """
        count = self.sample_count_per_record
        start = record_index * count
        end = min(start + count, len(self._samples))
        window = self._samples[start:end]
        if len(window) < count:
            _logger.warning(
                f"Signal {self.label!r}: record {record_index} has {len(window)} of {count} samples"
            )
        return window.astype(SAMPLE_DTYPE).tobytes()

    def decode_blocks(self, blocks: Sequence[bytes]):
        """Fill samples from this channel's blocks, in record order."""
        data = b"".join(blocks)
        usable = len(data) - len(data) % SAMPLE_WIDTH
        self._samples = np.frombuffer(data[:usable], dtype=SAMPLE_DTYPE).astype(np.int16)

    def __repr__(self) -> str:
        preview = ",".join(str(v) for v in self._samples[:10])
        return (
            f"Signal({self.label} {self.sample_count_per_record}/{len(self._samples)} "
            f"[{preview} ...])"
        )


class AnnotationSignal:
    """
    "EDF Annotations" channel.

    annotations[i] is written into record i; None (or running past the
    end of the list) leaves only the record-index marker.
    """

    is_annotation = True

    def __init__(
        self,
        sample_count_per_record: int,
        annotations: Optional[Sequence[Optional[TAL]]] = None,
        header: Optional[SignalHeader] = None,
    ):
        """
        Initialize an annotation channel.

        Args:
            sample_count_per_record: Block budget in 2-byte samples
            annotations: Per-record TALs
            header: Header read from a file; built from the fixed
                annotation values when omitted
        """
        if header is None:
            header = annotation_signal_header(sample_count_per_record)
        self.header = header
        self.annotations: List[Optional[TAL]] = list(annotations or [])
        self.index: Optional[int] = None  # position in the file header

    @property
    def label(self) -> str:
        return self.header.label

    @property
    def sample_count_per_record(self) -> int:
        return self.header.sample_count_per_record

    @property
    def block_size(self) -> int:
        return self.header.block_size

    def scale_factor(self) -> float:
        return self.header.scale_factor()

    def check_fits(self, record_count: int):
        """Raise StructuralMismatch if there are more annotations than records."""
        if len(self.annotations) > record_count:
            raise StructuralMismatch(
                f"annotation signal has {len(self.annotations)} entries "
                f"for {record_count} records",
                signal=self.label,
            )

    def encode_block(self, record_index: int) -> bytes:
        return encode_annotation_block(record_index, self.annotations, self.sample_count_per_record)

    def decode_blocks(self, blocks: Sequence[bytes]):
        """Fill annotations from this channel's blocks, in record order."""
        annotations = []
        for record_index, block in enumerate(blocks):
            partial = len(block) < self.block_size
            annotations.append(decode_annotation_block(block, record_index, partial=partial))

        while annotations and annotations[-1] is None:
            annotations.pop()
        self.annotations = annotations

    def __repr__(self) -> str:
        preview = ",".join(str(a) for a in self.annotations[:10])
        return (
            f"AnnotationSignal({self.label} {self.sample_count_per_record}/"
            f"{len(self.annotations)} [{preview} ...])"
        )
