"""CLI tests with the audio decoder replaced by synthetic signals."""

import numpy as np
import pytest
from click.testing import CliRunner

from chordtuner.audio_source import AudioFileSource
from chordtuner.chord_tracker import ChordSegment
from chordtuner.cli import _segment_row, main
from chordtuner.duration_quantizer import DurationQuantizer

SAMPLE_RATE = 22050


def _sine(freq: float, seconds: float) -> np.ndarray:
    t = np.arange(int(SAMPLE_RATE * seconds)) / SAMPLE_RATE
    return (0.5 * np.sin(2 * np.pi * freq * t)).astype(np.float32)


@pytest.fixture
def fake_audio(monkeypatch: pytest.MonkeyPatch):
    def install(samples: np.ndarray) -> None:
        monkeypatch.setattr(AudioFileSource, "load", lambda self, path: (samples, float(SAMPLE_RATE)))

    return install


def test_version() -> None:
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "chordtuner" in result.output


def test_tune_reports_note(fake_audio) -> None:
    fake_audio(_sine(440.0, 1.0))
    result = CliRunner().invoke(main, ["tune", "a4.wav"])

    assert result.exit_code == 0, result.output
    assert "A4" in result.output
    assert "Hz" in result.output


def test_tune_on_silence(fake_audio) -> None:
    fake_audio(np.zeros(SAMPLE_RATE, dtype=np.float32))
    result = CliRunner().invoke(main, ["tune", "silence.wav"])

    assert result.exit_code == 0
    assert "No pitch detected." in result.output


def test_missing_file_exits_with_error(tmp_path) -> None:
    result = CliRunner().invoke(main, ["tune", str(tmp_path / "missing.wav")])
    assert result.exit_code == 1


def test_chords_on_silence_fails(fake_audio) -> None:
    fake_audio(np.zeros(SAMPLE_RATE, dtype=np.float32))
    result = CliRunner().invoke(main, ["chords", "silence.wav"])
    assert result.exit_code == 1


def test_chords_writes_sheet_and_midi(fake_audio, tmp_path) -> None:
    # 41 * 22050 / 4096 Hz sits exactly on an STFT bin (about A3).
    fake_audio(np.concatenate([_sine(41 * SAMPLE_RATE / 4096, 1.0), _sine(61 * SAMPLE_RATE / 4096, 1.0)]))
    sheet = tmp_path / "take.md"
    midi = tmp_path / "take.mid"

    result = CliRunner().invoke(
        main,
        ["chords", "take.wav", "--tempo", "90", "--sheet", str(sheet), "--midi", str(midi)],
    )

    assert result.exit_code == 0, result.output
    assert "Detected" in result.output
    assert sheet.read_text(encoding="utf-8").startswith("# take")
    assert midi.read_bytes().startswith(b"MThd")


def test_segment_row_keeps_an_end_time_of_zero() -> None:
    segment = ChordSegment(note_names=("C4",), start_time=0.0, end_time=0.0, label="C4")
    row = _segment_row(DurationQuantizer(), segment, end_time=4.0)

    assert "sixteenth" in row
    assert "whole" not in row


def test_segment_row_uses_end_time_for_open_segments() -> None:
    segment = ChordSegment(note_names=("C4",), start_time=0.0, label="C4")
    assert "whole" in _segment_row(DurationQuantizer(), segment, end_time=2.0)
