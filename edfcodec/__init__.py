"""
edfcodec - European Data Format (EDF/EDF+) codec.
Fixed-width ASCII header, interleaved 16-bit data records and
time-stamped annotation lists (TAL).
"""

__version__ = "0.1.0"

# Header layout
FIXED_HEADER_SIZE = 256  # bytes, general header block
HEADER_ENCODING = "ascii"

# Data records
SAMPLE_WIDTH = 2  # bytes, little-endian signed 16-bit
SAMPLE_MIN = -32768
SAMPLE_MAX = 32767

# Annotation channel fixed header values (EDF+ section 2.2.1)
ANNOTATION_LABEL = "EDF Annotations"
ANNOTATION_DIGITAL_MIN = -32768
ANNOTATION_DIGITAL_MAX = 32767
ANNOTATION_PHYSICAL_MIN = -1.0
ANNOTATION_PHYSICAL_MAX = 1.0

# TAL separators (EDF+ section 2.2.2)
TAL_DURATION_MARK = 0x15  # precedes duration
TAL_SEPARATOR = 0x14  # ends onset/duration and annotation text
TAL_TERMINATOR = 0x00  # ends the TAL
TAL_ENCODING = "utf-8"

# Numeric header fields: "0.###"
MAX_FRACTION_DIGITS = 3

from .errors import EdfError, FormatViolation, LayoutOverflow, StructuralMismatch
from .fields import Slot, HEADER_SLOTS, SIGNAL_SLOTS, encode_field, decode_field, format_number
from .header import Header, SignalHeader, annotation_signal_header
from .tal import TAL
from .signal import Signal, AnnotationSignal
from .records import record_index_marker, encode_annotation_block, decode_annotation_block
from .codec import Writer, Reader, parse_header, allocate_channels, fill_channel, encode_file
from .edffile import EdfFile

__all__ = [
    "EdfError",
    "FormatViolation",
    "LayoutOverflow",
    "StructuralMismatch",
    "Slot",
    "HEADER_SLOTS",
    "SIGNAL_SLOTS",
    "encode_field",
    "decode_field",
    "format_number",
    "Header",
    "SignalHeader",
    "annotation_signal_header",
    "TAL",
    "Signal",
    "AnnotationSignal",
    "record_index_marker",
    "encode_annotation_block",
    "decode_annotation_block",
    "Writer",
    "Reader",
    "parse_header",
    "allocate_channels",
    "fill_channel",
    "encode_file",
    "EdfFile",
]
