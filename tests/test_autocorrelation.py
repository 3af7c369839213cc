"""Unit tests for AutocorrelationPitchEstimator."""

import numpy as np
import pytest

from chordtuner.autocorrelation import AutocorrelationPitchEstimator

SAMPLE_RATE = 44100


def _sine(freq: float, amplitude: float = 0.5, size: int = 2048, sr: int = SAMPLE_RATE) -> np.ndarray:
    t = np.arange(size) / sr
    return amplitude * np.sin(2 * np.pi * freq * t)


def test_all_zero_buffer_has_no_pitch() -> None:
    assert AutocorrelationPitchEstimator().estimate(np.zeros(2048), SAMPLE_RATE) is None


def test_quiet_buffer_has_no_pitch() -> None:
    quiet = _sine(440.0, amplitude=0.005)
    assert AutocorrelationPitchEstimator.rms(quiet) < 0.01
    assert AutocorrelationPitchEstimator().estimate(quiet, SAMPLE_RATE) is None


def test_empty_buffer_has_no_pitch() -> None:
    assert AutocorrelationPitchEstimator().estimate(np.array([]), SAMPLE_RATE) is None


def test_buffer_never_reaching_trim_threshold_has_no_pitch() -> None:
    # Loud but entirely below the edge-trim level: both edges trim to the middle.
    assert AutocorrelationPitchEstimator().estimate(np.full(2048, -0.5), SAMPLE_RATE) is None


@pytest.mark.parametrize("freq", [220.0, 440.0, 659.26])
def test_pure_sine_estimate_within_two_percent(freq: float) -> None:
    estimate = AutocorrelationPitchEstimator().estimate(_sine(freq), SAMPLE_RATE)
    assert estimate is not None
    assert estimate == pytest.approx(freq, rel=0.02)


def test_silence_threshold_is_configurable() -> None:
    quiet = _sine(440.0, amplitude=0.005)
    sensitive = AutocorrelationPitchEstimator(silence_rms_threshold=0.001, edge_trim_threshold=0.001)
    estimate = sensitive.estimate(quiet, SAMPLE_RATE)
    assert estimate == pytest.approx(440.0, rel=0.02)


def test_rms_of_constant_signal() -> None:
    assert AutocorrelationPitchEstimator.rms(np.full(100, 0.5)) == pytest.approx(0.5)
    assert AutocorrelationPitchEstimator.rms(np.array([])) == 0.0
