"""Single-user todo tracker service."""

__version__ = "1.0.0"
