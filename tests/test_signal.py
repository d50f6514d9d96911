"""
Tests for the channel variants.
"""

import numpy as np
import pytest

from edfcodec import Signal, AnnotationSignal, TAL, StructuralMismatch, LayoutOverflow

from conftest import eeg_header


class TestSignal:
    """Test ordinary channels."""

    def test_samples_stored_as_int16(self):
        signal = Signal(eeg_header("EEG 1"), [1, -2, 3])
        assert signal.samples.dtype == np.int16
        np.testing.assert_array_equal(signal.samples, [1, -2, 3])

    def test_empty_by_default(self):
        assert len(Signal(eeg_header("EEG 1")).samples) == 0

    def test_integral_floats_accepted(self):
        signal = Signal(eeg_header("EEG 1"), np.array([1.0, 2.0]))
        np.testing.assert_array_equal(signal.samples, [1, 2])

    def test_sample_range(self):
        Signal(eeg_header("EEG 1"), [-32768, 32767])
        with pytest.raises(ValueError):
            Signal(eeg_header("EEG 1"), [32768])
        with pytest.raises(ValueError):
            Signal(eeg_header("EEG 1"), [-32769])

    def test_fractional_samples(self):
        with pytest.raises(ValueError):
            Signal(eeg_header("EEG 1"), [1.5])

    def test_two_dimensional_samples(self):
        with pytest.raises(ValueError):
            Signal(eeg_header("EEG 1"), [[1, 2], [3, 4]])

    def test_negative_sample_count(self):
        with pytest.raises(ValueError):
            Signal(eeg_header("EEG 1", samples_per_record=-1))

    def test_encode_block(self):
        signal = Signal(eeg_header("EEG 1", 2), [1, -1, 256, 0])
        assert signal.encode_block(0) == b"\x01\x00\xff\xff"
        assert signal.encode_block(1) == b"\x00\x01\x00\x00"

    def test_encode_block_short_window(self):
        signal = Signal(eeg_header("EEG 1", 2), [1, 2, 3])
        assert signal.encode_block(1) == b"\x03\x00"
        assert signal.encode_block(2) == b""

    def test_decode_blocks(self):
        signal = Signal(eeg_header("EEG 1", 2))
        signal.decode_blocks([b"\x01\x00\xff\xff", b"\x00\x01\x00"])
        np.testing.assert_array_equal(signal.samples, [1, -1, 256])

    def test_check_fits(self):
        signal = Signal(eeg_header("EEG 1", 2), [1, 2, 3, 4, 5])
        signal.check_fits(3)
        with pytest.raises(StructuralMismatch) as info:
            signal.check_fits(2)
        assert info.value.signal == "EEG 1"

    def test_check_fits_short_window(self):
        signal = Signal(eeg_header("EEG 1", 2), [1, 2, 3])
        signal.check_fits(2)
        with pytest.raises(StructuralMismatch):
            signal.check_fits(3)

    def test_scale_factor(self):
        assert Signal(eeg_header("EEG 1")).scale_factor() == pytest.approx(400 / 65535)

    def test_repr(self):
        assert "EEG 1 4/3" in repr(Signal(eeg_header("EEG 1"), [1, 2, 3]))


class TestAnnotationSignal:
    """Test annotation channels."""

    def test_default_header(self):
        channel = AnnotationSignal(30)
        assert channel.label == "EDF Annotations"
        assert channel.sample_count_per_record == 30
        assert channel.block_size == 60
        assert channel.annotations == []
        assert channel.is_annotation

    def test_scale_factor(self):
        assert AnnotationSignal(30).scale_factor() == pytest.approx(2 / 65535)

    def test_encode_block(self):
        channel = AnnotationSignal(10, [TAL(0, -1, "Start")])
        block = channel.encode_block(0)
        assert block.startswith(b"+0.0\x14\x14\x00+0\x14Start\x14\x00")
        assert len(block) == 20

    def test_encode_block_overflow(self):
        channel = AnnotationSignal(4, [TAL(0, -1, "Start")])
        with pytest.raises(LayoutOverflow):
            channel.encode_block(0)

    def test_decode_blocks(self):
        source = AnnotationSignal(10, [TAL(0, -1, "Start"), None, TAL(2, 1, "End")])
        blocks = [source.encode_block(i) for i in range(5)]

        channel = AnnotationSignal(10)
        channel.decode_blocks(blocks)
        assert channel.annotations == [TAL(0.0, -1.0, "Start"), None, TAL(2.0, 1.0, "End")]

    def test_decode_blocks_short_final_block(self):
        source = AnnotationSignal(10, [TAL(0, -1, "Start"), TAL(1, -1, "Next")])
        blocks = [source.encode_block(0), source.encode_block(1)[:12]]

        channel = AnnotationSignal(10)
        channel.decode_blocks(blocks)
        assert channel.annotations == [TAL(0.0, -1.0, "Start")]

    def test_check_fits(self):
        channel = AnnotationSignal(10, [TAL(0), TAL(1)])
        channel.check_fits(2)
        with pytest.raises(StructuralMismatch):
            channel.check_fits(1)
