"""Exception types raised by chordtuner."""


class ChordTunerError(Exception):
    """Base class for chordtuner errors."""


class InputUnavailableError(ChordTunerError):
    """The audio source could not produce sample buffers (missing file, decode failure)."""


class MalformedNoteNameError(ChordTunerError, ValueError):
    """A note name does not match the ``[A-G]#?`` + integer-octave grammar."""
