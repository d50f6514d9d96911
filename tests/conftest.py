"""
Shared fixtures: a small two-signal file with one annotation channel.
"""

import pytest

from edfcodec import EdfFile, Header, Signal, SignalHeader, AnnotationSignal, TAL


def eeg_header(label: str, samples_per_record: int = 4) -> SignalHeader:
    return SignalHeader(
        label=label,
        transducer_type="AgAgCl electrode",
        physical_dimension="uV",
        physical_minimum=-200.0,
        physical_maximum=200.0,
        digital_minimum=-32768,
        digital_maximum=32767,
        prefiltering="HP:0.1Hz LP:75Hz",
        sample_count_per_record=samples_per_record,
    )


SIGNAL_1 = [0, 1, 2, 3, 4, 5, 6, 7]
SIGNAL_2 = [-1000, 2000, -32768, 32767, 10, 20, 30, 40]
ANNOTATIONS = [TAL(0, -1, "Start"), TAL(1.5, 0.5, "Event")]


@pytest.fixture
def sample_edf():
    """2 records, 2 signals x 4 samples, 1 annotation channel x 16 samples."""
    header = Header(
        patient_id="X F 02-MAY-1951 Haagse_Harry",
        record_id="Startdate 17-OCT-2026 PSG-1234/2026 NN Telemetry03",
        start_date="17.10.26",
        start_time="08.30.05",
        reserved="EDF+C",
        record_count=2,
        record_duration=1.0,
    )
    return EdfFile(
        header,
        signals=[Signal(eeg_header("EEG 1"), SIGNAL_1), Signal(eeg_header("EEG 2"), SIGNAL_2)],
        annotation_signals=[AnnotationSignal(16, ANNOTATIONS)],
    )
