"""Record live HLS streams to disk by polling their media playlist."""

__version__ = "0.5.0"
