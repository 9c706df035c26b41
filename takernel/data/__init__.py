"""
Bar data interop.

Converts OHLCV DataFrames (the shape market-data loaders produce) into the
Bar sequences the kernel and indicators consume, and back.
"""
from .bars import bars_from_frame, bars_to_frame

__all__ = ['bars_from_frame', 'bars_to_frame']
