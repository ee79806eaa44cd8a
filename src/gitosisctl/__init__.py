"""gitosisctl — access-control backend for a gitosis authority repository."""

__version__ = "0.1.0"
