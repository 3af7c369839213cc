"""Unit tests for FrequencyNoteMapper."""

import pytest

from chordtuner.errors import MalformedNoteNameError
from chordtuner.note_mapper import (
    FrequencyNoteMapper,
    TuningStatus,
    midi_to_note_name,
    split_note_name,
)


def test_a4_maps_to_midi_69() -> None:
    pitch = FrequencyNoteMapper().frequency_to_pitch(440.0)
    assert pitch is not None
    assert pitch.note_name == "A4"
    assert pitch.midi_number == 69
    assert pitch.cents_offset == pytest.approx(0.0, abs=1e-9)


def test_middle_c_and_sharp_names() -> None:
    mapper = FrequencyNoteMapper()
    c4 = mapper.frequency_to_pitch(261.63)
    cs5 = mapper.frequency_to_pitch(554.37)
    assert c4 is not None and c4.note_name == "C4"
    assert cs5 is not None and cs5.note_name == "C#5"
    assert cs5.pitch_class == "C#"
    assert cs5.octave == 5


def test_slightly_sharp_frequency_reports_positive_cents() -> None:
    pitch = FrequencyNoteMapper().frequency_to_pitch(445.0)
    assert pitch is not None
    assert pitch.note_name == "A4"
    assert pitch.cents_offset == pytest.approx(19.56, abs=0.01)


@pytest.mark.parametrize("freq", [0.0, -10.0, float("nan")])
def test_non_positive_frequency_has_no_pitch(freq: float) -> None:
    assert FrequencyNoteMapper().frequency_to_pitch(freq) is None


def test_pitch_to_frequency_a4() -> None:
    assert FrequencyNoteMapper().pitch_to_frequency("A", 4) == pytest.approx(440.0)


def test_note_to_frequency_negative_octave() -> None:
    assert FrequencyNoteMapper().note_to_frequency("C-1") == pytest.approx(8.1758, abs=1e-3)


def test_conversions_are_inverse_for_every_midi_number() -> None:
    mapper = FrequencyNoteMapper()
    for midi in range(0, 128):
        name, octave = split_note_name(midi_to_note_name(midi))
        pitch = mapper.frequency_to_pitch(mapper.pitch_to_frequency(name, octave))
        assert pitch is not None
        assert pitch.midi_number == midi


@pytest.mark.parametrize("name", ["H", "Cb", "c", "C##", "", "E#x"])
def test_malformed_pitch_class_is_rejected(name: str) -> None:
    with pytest.raises(MalformedNoteNameError):
        FrequencyNoteMapper().pitch_to_frequency(name, 4)


def test_non_integer_octave_is_rejected() -> None:
    with pytest.raises(MalformedNoteNameError):
        FrequencyNoteMapper().pitch_to_frequency("A", "4")  # type: ignore[arg-type]


@pytest.mark.parametrize("note", ["A#", "4", "a4", "A 4", "Bb3"])
def test_malformed_note_name_is_a_value_error(note: str) -> None:
    with pytest.raises(ValueError):
        FrequencyNoteMapper().note_to_frequency(note)


def test_note_to_midi() -> None:
    mapper = FrequencyNoteMapper()
    assert mapper.note_to_midi("C4") == 60
    assert mapper.note_to_midi("G#2") == 44


@pytest.mark.parametrize("freq", [27.5, 261.63, 440.0, 4186.0])
def test_cents_offset_of_identical_frequencies_is_zero(freq: float) -> None:
    assert FrequencyNoteMapper.cents_offset(freq, freq) == 0.0


def test_cents_offset_of_an_octave() -> None:
    assert FrequencyNoteMapper.cents_offset(880.0, 440.0) == pytest.approx(1200.0)


def test_tuning_status_thresholds() -> None:
    mapper = FrequencyNoteMapper()
    assert mapper.tuning_status(0) is TuningStatus.IN_TUNE
    assert mapper.tuning_status(4.9) is TuningStatus.IN_TUNE
    assert mapper.tuning_status(-4.9) is TuningStatus.IN_TUNE
    assert mapper.tuning_status(6) is TuningStatus.SHARP
    assert mapper.tuning_status(-6) is TuningStatus.FLAT
    assert mapper.tuning_status(5) is TuningStatus.SHARP


def test_tuning_tolerance_is_configurable() -> None:
    mapper = FrequencyNoteMapper(in_tune_tolerance_cents=10)
    assert mapper.tuning_status(6) is TuningStatus.IN_TUNE
    assert mapper.tuning_status(-12) is TuningStatus.FLAT
