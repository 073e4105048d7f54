"""Task board: client-side task state sync and drag/drop move engine."""

__version__ = "0.1.0"
