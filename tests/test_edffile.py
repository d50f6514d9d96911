"""
Tests for the EdfFile model: files on disk, lazy reading, base64.
"""

import base64

import numpy as np
import pytest

from edfcodec import TAL, EdfFile, Header, LayoutOverflow

from conftest import SIGNAL_1, SIGNAL_2, ANNOTATIONS


class TestSaveAndRead:
    """Test file round trips."""

    def test_save_and_read(self, sample_edf, tmp_path):
        path = tmp_path / "test.edf"
        sample_edf.save(path)

        assert path.stat().st_size == 1024 + 2 * 48

        edf = EdfFile.read(path)
        np.testing.assert_array_equal(edf.signals[0].samples, SIGNAL_1)
        np.testing.assert_array_equal(edf.signals[1].samples, SIGNAL_2)
        assert edf.annotation_signals[0].annotations == ANNOTATIONS
        assert edf.header.start_datetime.year == 2026

    def test_save_without_header(self, tmp_path):
        path = tmp_path / "empty.edf"
        EdfFile().save(path)
        assert not path.exists()

    def test_failed_save_keeps_existing_file(self, sample_edf, tmp_path):
        path = tmp_path / "test.edf"
        path.write_bytes(b"previous contents")
        sample_edf.annotation_signals[0].annotations[1] = TAL(1, -1, "x" * 40)

        with pytest.raises(LayoutOverflow):
            sample_edf.save(path)
        assert path.read_bytes() == b"previous contents"

    def test_to_bytes_without_header(self):
        with pytest.raises(ValueError):
            EdfFile().to_bytes()

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            EdfFile.read(tmp_path / "missing.edf")

    def test_channels_order(self, sample_edf):
        assert [c.label for c in sample_edf.channels] == ["EEG 1", "EEG 2", "EDF Annotations"]

    def test_get_signal(self, sample_edf):
        assert sample_edf.get_signal("EEG 2") is sample_edf.signals[1]
        assert sample_edf.get_signal("EEG 3") is None


class TestOpen:
    """Test lazy, per-signal reading."""

    def test_open_allocates_empty_signals(self, sample_edf, tmp_path):
        path = tmp_path / "test.edf"
        sample_edf.save(path)

        with EdfFile.open(path) as edf:
            assert edf.header.signal_count == 3
            assert all(len(s.samples) == 0 for s in edf.signals)
            assert edf.annotation_signals[0].annotations == []

    def test_read_signal_by_index(self, sample_edf, tmp_path):
        path = tmp_path / "test.edf"
        sample_edf.save(path)

        with EdfFile.open(path) as edf:
            signal = edf.read_signal(1)
            np.testing.assert_array_equal(signal.samples, SIGNAL_2)
            assert len(edf.signals[0].samples) == 0

    def test_read_signal_by_label(self, sample_edf, tmp_path):
        path = tmp_path / "test.edf"
        sample_edf.save(path)

        with EdfFile.open(path) as edf:
            np.testing.assert_array_equal(edf.read_signal("EEG 1").samples, SIGNAL_1)
            assert edf.read_signal("EEG 9") is None
            with pytest.raises(IndexError):
                edf.read_signal(5)

    def test_read_annotations(self, sample_edf, tmp_path):
        path = tmp_path / "test.edf"
        sample_edf.save(path)

        with EdfFile.open(path) as edf:
            assert edf.read_annotations()[0].annotations == ANNOTATIONS

    def test_closed(self, sample_edf, tmp_path):
        path = tmp_path / "test.edf"
        sample_edf.save(path)

        edf = EdfFile.open(path)
        edf.close()
        with pytest.raises(RuntimeError):
            edf.read_signal(0)
        with pytest.raises(RuntimeError):
            EdfFile().read_annotations()

    def test_open_invalid_file(self, tmp_path):
        path = tmp_path / "short.edf"
        path.write_bytes(b"0" * 100)
        with pytest.raises(ValueError):
            EdfFile.open(path)


class TestBase64:
    """Test base64 convenience wrappers."""

    def test_round_trip(self, sample_edf):
        text = sample_edf.to_base64()
        assert base64.b64decode(text) == sample_edf.to_bytes()

        edf = EdfFile.from_base64(text)
        np.testing.assert_array_equal(edf.signals[1].samples, SIGNAL_2)
        assert edf.annotation_signals[0].annotations == ANNOTATIONS

    def test_invalid(self):
        with pytest.raises(ValueError):
            EdfFile.from_base64("not base64!")

    def test_repr(self, sample_edf):
        assert repr(sample_edf) == "EdfFile(records=2, signals=2, annotation_signals=1)"
        assert repr(EdfFile(Header())) == "EdfFile(records=0, signals=0, annotation_signals=0)"
