"""
EdfFile - in-memory EDF/EDF+ file: header, ordinary signals and
annotation signals.
"""

import base64
import logging
from pathlib import Path
from typing import List, Optional, Union

from .codec import Reader, encode_file
from .header import Header
from .signal import Signal, AnnotationSignal

# Module-level logger
_logger = logging.getLogger(__name__)


class EdfFile:
    """
    An EDF file model.

    Build one from scratch and save() it, read one completely with
    read() / from_bytes() / from_base64(), or open() it and load signals
    on demand with read_signal().
    """

    def __init__(
        self,
        header: Optional[Header] = None,
        signals: Optional[List[Signal]] = None,
        annotation_signals: Optional[List[AnnotationSignal]] = None,
    ):
        self.header = header
        self.signals: List[Signal] = list(signals or [])
        self.annotation_signals: List[AnnotationSignal] = list(annotation_signals or [])
        self._reader: Optional[Reader] = None

    @property
    def channels(self) -> list:
        """Ordinary signals followed by annotation signals, header order."""
        return self.signals + self.annotation_signals

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    @classmethod
    def _read_all(cls, reader: Reader) -> "EdfFile":
        header = reader.read_header()
        signals, annotation_signals = reader.read_signals(header)
        _logger.info(
            f"Read {header.record_count} records: {len(signals)} signals, "
            f"{len(annotation_signals)} annotation signals"
        )
        return cls(header, signals, annotation_signals)

    @classmethod
    def read(cls, path: Union[str, Path]) -> "EdfFile":
        """Read a whole EDF file into memory."""
        with Reader(open(path, "rb")) as reader:
            return cls._read_all(reader)

    @classmethod
    def from_bytes(cls, data: bytes) -> "EdfFile":
        """Read a whole EDF file from a memory buffer."""
        with Reader(data) as reader:
            return cls._read_all(reader)

    @classmethod
    def from_base64(cls, text: str) -> "EdfFile":
        return cls.from_bytes(base64.b64decode(text, validate=True))

    @classmethod
    def open(cls, path: Union[str, Path]) -> "EdfFile":
        """
        Open an EDF file, read its header and allocate empty channels.

        The file stays open for read_signal() until close().
        """
        reader = Reader(open(path, "rb"))
        try:
            header = reader.read_header()
            signals, annotation_signals = reader.allocate_signals(header)
        except Exception:
            reader.close()
            raise

        edf = cls(header, signals, annotation_signals)
        edf._reader = reader
        return edf

    def read_signal(self, key: Union[int, str]) -> Optional[Signal]:
        """
        Load the samples of one ordinary signal.

        Args:
            key: Index into `signals`, or an exact (trimmed) label

        Returns:
            The filled signal, or None if no label matches
        """
        if self._reader is None:
            raise RuntimeError("EDF file is not open for reading")

        if isinstance(key, str):
            signal = self.get_signal(key)
            if signal is None:
                return None
        else:
            signal = self.signals[key]

        self._reader.read_signal(self.header, signal)
        return signal

    def read_annotations(self) -> List[AnnotationSignal]:
        """Load every annotation signal of an open file."""
        if self._reader is None:
            raise RuntimeError("EDF file is not open for reading")

        for annotation_signal in self.annotation_signals:
            self._reader.read_signal(self.header, annotation_signal)
        return self.annotation_signals

    def get_signal(self, label: str) -> Optional[Signal]:
        label = label.strip()
        return next((s for s in self.signals if s.label.strip() == label), None)

    def close(self):
        if self._reader is not None:
            self._reader.close()
            self._reader = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def save(self, path: Union[str, Path]):
        """Write the file; header size and signal columns are recomputed."""
        if self.header is None:
            _logger.warning(f"Nothing to save to {path}: no header")
            return

        data = encode_file(self)
        with open(path, "wb") as handle:
            handle.write(data)
        _logger.info(f"Saved {path} ({len(data)} bytes)")

    def to_bytes(self) -> bytes:
        if self.header is None:
            raise ValueError("EDF file has no header")
        return encode_file(self)

    def to_base64(self) -> str:
        return base64.b64encode(self.to_bytes()).decode("ascii")

    def __repr__(self) -> str:
        records = self.header.record_count if self.header else None
        return (
            f"EdfFile(records={records}, signals={len(self.signals)}, "
            f"annotation_signals={len(self.annotation_signals)})"
        )
