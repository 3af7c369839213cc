"""chordtuner CLI entry point."""

import logging
import sys
from pathlib import Path

import click

from chordtuner import __version__
from chordtuner.audio_source import AudioFileSource
from chordtuner.chord_tracker import ChordSegment
from chordtuner.config import AnalysisConfig
from chordtuner.duration_quantizer import DurationQuantizer
from chordtuner.errors import InputUnavailableError
from chordtuner.midi_exporter import MidiExporter
from chordtuner.notation_layout import max_per_line_for_width
from chordtuner.note_mapper import TuningStatus
from chordtuner.session import RecognitionSession

_TUNING_MARKS = {
    TuningStatus.FLAT: "flat  v",
    TuningStatus.IN_TUNE: "in tune",
    TuningStatus.SHARP: "sharp ^",
}


def _load_or_exit(source: AudioFileSource, audio_file: str):
    try:
        return source.load(audio_file)
    except InputUnavailableError as exc:
        click.echo(f"  ERROR: {exc}", err=True)
        sys.exit(1)


def _segment_row(quantizer: DurationQuantizer, segment: ChordSegment, end_time: float) -> str:
    segment_end = end_time if segment.end_time is None else segment.end_time
    symbol = quantizer.symbol_for(segment_end - segment.start_time)
    notes = " ".join(segment.note_names)
    return f"        {segment.start_time:7.2f}s  {segment.label:<8}  {symbol:<15}  {notes}"


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="chordtuner")
@click.option("-v", "--verbose", is_flag=True, help="Log per-segment and per-frame detail.")
def main(verbose: bool) -> None:
    """chordtuner — pitch tuner and chord-change recogniser for audio files."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ── chords subcommand ──────────────────────────────────────────────────────────

@main.command()
@click.argument("audio_file", type=click.Path(dir_okay=False))
@click.option(
    "--tempo",
    type=click.FloatRange(20, 300),
    default=120.0,
    show_default=True,
    help="Tempo in BPM used to turn chord lengths into note values.",
)
@click.option(
    "--threshold",
    type=float,
    default=-40.0,
    show_default=True,
    metavar="DB",
    help="Spectral peaks must rise above this level (dB relative to the loudest bin).",
)
@click.option(
    "--max-freq",
    type=click.FloatRange(min=1.0),
    default=1500.0,
    show_default=True,
    metavar="HZ",
    help="Ignore spectral peaks at or above this frequency.",
)
@click.option(
    "--silence-close",
    type=click.FloatRange(min=0.0),
    default=None,
    metavar="SECS",
    help="Close the sounding chord after this much silence. Default: keep it open.",
)
@click.option(
    "--width",
    type=click.IntRange(min=100),
    default=800,
    show_default=True,
    help="Sheet width used to decide how many chords go on one line.",
)
@click.option("--sheet", "sheet_path", default=None, metavar="PATH", help="Write sheet music here.")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["html", "md-vexflow"], case_sensitive=False),
    default="md-vexflow",
    show_default=True,
    help="Sheet format: HTML engraved with verovio, or Markdown with VexFlow script.",
)
@click.option("--midi", "midi_path", default=None, metavar="PATH", help="Write the chords as MIDI here.")
def chords(
    audio_file: str,
    tempo: float,
    threshold: float,
    max_freq: float,
    silence_close: float | None,
    width: int,
    sheet_path: str | None,
    output_format: str,
    midi_path: str | None,
) -> None:
    """
    Detect chord changes in an audio file and optionally write sheet music.

    \b
    Examples:
      chordtuner chords take1.wav
      chordtuner chords take1.wav --tempo 90 --sheet take1.md
      chordtuner chords take1.wav --sheet take1.html --format html --midi take1.mid
    """
    config = AnalysisConfig(
        amplitude_threshold_db=threshold,
        max_frequency_hz=max_freq,
        tempo_bpm=tempo,
        silence_close_after=silence_close,
    )
    source = AudioFileSource()

    click.echo(f"chordtuner v{__version__}")
    click.echo(f"  Audio  : {audio_file}")
    click.echo(f"  Tempo  : {tempo:g} BPM")
    click.echo()

    click.echo("[1/3] Decoding audio...")
    samples, sr = _load_or_exit(source, audio_file)
    end_time = source.duration(samples, sr)

    click.echo("[2/3] Tracking chord changes...")
    session = RecognitionSession(config)
    session.start()
    for timestamp, frame in source.spectrum_frames(samples, sr):
        session.tick(frame, timestamp)
    session.stop(end_time)

    history = session.history
    if not history:
        click.echo("  WARNING: No notes detected. Try lowering --threshold.", err=True)
        sys.exit(1)

    click.echo(f"      Detected {len(history)} segment(s):")
    for segment in history:
        click.echo(_segment_row(session.quantizer, segment, end_time))

    click.echo("[3/3] Writing outputs...")
    if sheet_path is None and midi_path is None:
        click.echo("      (no --sheet or --midi given)")

    if sheet_path is not None:
        from chordtuner.sheet_exporter import SheetExporter

        lines = session.notation_lines(max_per_line_for_width(width))
        title = Path(audio_file).stem.replace("_", " ")
        exporter = SheetExporter(title=title, output_format=output_format, tempo_bpm=tempo)
        try:
            exporter.export(lines, sheet_path)
        except OSError as exc:
            click.echo(f"  ERROR: Could not write sheet file — {exc}", err=True)
            sys.exit(1)
        except ValueError as exc:
            click.echo(f"  ERROR: Could not render sheet — {exc}", err=True)
            sys.exit(1)
        click.echo(f"      Sheet → '{sheet_path}' ({len(lines)} line(s))")

    if midi_path is not None:
        try:
            MidiExporter(tempo=tempo).export(history, midi_path)
        except OSError as exc:
            click.echo(f"  ERROR: Could not write MIDI file — {exc}", err=True)
            sys.exit(1)
        click.echo(f"      MIDI  → '{midi_path}'")

    click.echo()
    click.echo("Done!")


# ── tune subcommand ────────────────────────────────────────────────────────────

@main.command()
@click.argument("audio_file", type=click.Path(dir_okay=False))
@click.option(
    "--tolerance",
    type=click.FloatRange(min=0.0),
    default=5.0,
    show_default=True,
    metavar="CENTS",
    help="Deviation below which a note counts as in tune.",
)
@click.option(
    "--silence-rms",
    type=click.FloatRange(min=0.0),
    default=0.01,
    show_default=True,
    help="Frames quieter than this RMS level are treated as silence.",
)
def tune(audio_file: str, tolerance: float, silence_rms: float) -> None:
    """
    Print the note, frequency and tuning of a monophonic recording over time.

    A line is printed whenever the detected note or tuning status changes.

    \b
    Examples:
      chordtuner tune open_a_string.wav
      chordtuner tune flute.wav --tolerance 10
    """
    config = AnalysisConfig(in_tune_tolerance_cents=tolerance, silence_rms_threshold=silence_rms)
    source = AudioFileSource()
    samples, sr = _load_or_exit(source, audio_file)

    session = RecognitionSession(config)
    session.start()
    last_reading: tuple[str, TuningStatus] | None = None
    for timestamp, frame in source.waveform_frames(samples, sr):
        result = session.tick(frame, timestamp)
        if not result.has_pitch or result.tuning is None:
            continue
        pitch = result.pitches[0]
        reading = (pitch.note_name, result.tuning)
        if reading == last_reading:
            continue
        last_reading = reading
        click.echo(
            f"{timestamp:7.2f}s  {pitch.note_name:<4}  {pitch.frequency_hz:8.2f} Hz  "
            f"{pitch.cents_offset:+6.1f} cents  {_TUNING_MARKS[result.tuning]}"
        )
    session.stop(source.duration(samples, sr))

    if last_reading is None:
        click.echo("No pitch detected.")
