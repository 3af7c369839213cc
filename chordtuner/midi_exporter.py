"""MidiExporter: writes the chord history of a session to a MIDI file."""

from __future__ import annotations

import logging
from typing import Sequence

from midiutil import MIDIFile

from chordtuner.chord_tracker import ChordSegment
from chordtuner.note_mapper import FrequencyNoteMapper

logger = logging.getLogger(__name__)

# Format 1 MIDI: track 0 carries tempo only, note data goes to track 1.
TRACK_CONDUCTOR = 0
TRACK_CHORDS = 1
CHANNEL_CHORDS = 0


class MidiExporter:
    """
    Writes closed chord segments as a two-track MIDI file.

    Track 0 is the conductor track (tempo only). Track 1 holds one note per
    detected pitch of each segment, sounding for the segment's full length.
    Times are shifted so the first segment starts at beat 0 and converted with
    ``beats = seconds * tempo / 60``. Open segments are skipped.
    """

    DEFAULT_TEMPO = 120
    DEFAULT_VELOCITY = 80

    def __init__(self, tempo: float = DEFAULT_TEMPO, velocity: int = DEFAULT_VELOCITY) -> None:
        """
        Args:
            tempo:    Tempo in beats per minute, the same one used for quantization.
            velocity: MIDI note-on velocity.
        """
        self.tempo = tempo
        self.velocity = velocity
        self._mapper = FrequencyNoteMapper()

    def _seconds_to_beats(self, seconds: float) -> float:
        return seconds * (self.tempo / 60.0)

    def export(self, segments: Sequence[ChordSegment], output_path: str) -> int:
        """
        Render closed segments to a Standard MIDI File.

        Returns:
            Number of segments written. Zero-length segments are not counted.

        Raises:
            OSError: If the output file cannot be opened for writing.
        """
        closed = [s for s in segments if s.end_time is not None]
        origin = closed[0].start_time if closed else 0.0

        midi = MIDIFile(numTracks=2, removeDuplicates=False, deinterleave=False)
        midi.addTempo(TRACK_CONDUCTOR, 0, self.tempo)
        midi.addTrackName(TRACK_CHORDS, 0, "Detected chords")

        written = 0
        for segment in closed:
            start_beat = self._seconds_to_beats(segment.start_time - origin)
            duration_beats = self._seconds_to_beats(segment.end_time - segment.start_time)
            if duration_beats <= 0:
                continue
            for name in dict.fromkeys(segment.note_names):
                pitch = self._mapper.note_to_midi(name)
                if not 0 <= pitch <= 127:
                    logger.debug("Skipping %s: outside the MIDI range", name)
                    continue
                midi.addNote(
                    track=TRACK_CHORDS,
                    channel=CHANNEL_CHORDS,
                    pitch=pitch,
                    time=start_beat,
                    duration=duration_beats,
                    volume=self.velocity,
                )
            written += 1

        with open(output_path, "wb") as f:
            midi.writeFile(f)
        logger.info("Wrote %d segment(s) to %s", written, output_path)
        return written
