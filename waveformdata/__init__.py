"""Generate, rescale and store audio waveform min/max data, and read and write WAV audio."""

__version__ = "1.0.0"