"""AudioFileSource: decodes audio files into spectrum and waveform frames via librosa."""

from __future__ import annotations

import logging
import os
from typing import Iterator

import librosa
import numpy as np

from chordtuner.errors import InputUnavailableError
from chordtuner.session import SpectrumFrame, WaveformFrame

logger = logging.getLogger(__name__)


class AudioFileSource:
    """
    Loads an audio file with librosa and slices it into analysis frames.

    Two frame kinds are produced, matching the two pitch estimators:

      - spectrum frames: STFT magnitudes in dB (relative to the loudest bin
        of the whole file), for chord recognition;
      - waveform frames: raw sample windows, for the single-note tuner.

    Each frame is paired with its start time in seconds:

        source = AudioFileSource()
        samples, sr = source.load("take1.wav")
        for timestamp, frame in source.spectrum_frames(samples, sr):
            session.tick(frame, timestamp)
    """

    def __init__(self, n_fft: int = 4096, hop_length: int = 1024, frame_length: int = 2048) -> None:
        """
        Args:
            n_fft:        STFT size for spectrum frames.
            hop_length:   Samples between consecutive frames of either kind.
            frame_length: Window size for waveform frames.
        """
        self.n_fft = n_fft
        self.hop_length = hop_length
        self.frame_length = frame_length

    def load(self, audio_path: str) -> tuple[np.ndarray, float]:
        """
        Decode an audio file to mono samples at its native sample rate.

        Raises:
            InputUnavailableError: If the file is missing or cannot be decoded.
        """
        if not os.path.exists(audio_path):
            raise InputUnavailableError(f"Audio file not found: '{audio_path}'.")
        try:
            samples, sr = librosa.load(audio_path, sr=None, mono=True)
        except Exception as exc:
            raise InputUnavailableError(f"Failed to decode '{audio_path}': {exc}") from exc

        logger.info("Loaded %s: %d samples at %d Hz", audio_path, samples.size, sr)
        return samples, float(sr)

    def duration(self, samples: np.ndarray, sample_rate: float) -> float:
        return samples.size / sample_rate

    def spectrum_frames(
        self, samples: np.ndarray, sample_rate: float
    ) -> Iterator[tuple[float, SpectrumFrame]]:
        """Yield (timestamp, SpectrumFrame) for every STFT column."""
        if samples.size == 0:
            return
        magnitudes = np.abs(librosa.stft(samples, n_fft=self.n_fft, hop_length=self.hop_length))
        magnitudes_db = librosa.amplitude_to_db(magnitudes, ref=np.max)
        times = librosa.frames_to_time(
            np.arange(magnitudes_db.shape[1]), sr=sample_rate, hop_length=self.hop_length
        )
        for column, timestamp in enumerate(times):
            yield float(timestamp), SpectrumFrame(
                magnitudes_db=magnitudes_db[:, column],
                sample_rate=sample_rate,
                transform_size=self.n_fft,
            )

    def waveform_frames(
        self, samples: np.ndarray, sample_rate: float
    ) -> Iterator[tuple[float, WaveformFrame]]:
        """Yield (timestamp, WaveformFrame) windows of *frame_length* samples."""
        if samples.size == 0:
            return
        if samples.size < self.frame_length:
            samples = librosa.util.fix_length(samples, size=self.frame_length)

        frames = librosa.util.frame(samples, frame_length=self.frame_length, hop_length=self.hop_length)
        for index in range(frames.shape[1]):
            timestamp = index * self.hop_length / sample_rate
            window = np.ascontiguousarray(frames[:, index])
            yield timestamp, WaveformFrame(samples=window, sample_rate=sample_rate)
