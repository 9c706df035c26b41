"""
Technical-analysis kernel for charting indicators.

Provides unified interfaces for:
- Series over OHLCV bars (kernel.series)
- Rolling-window primitives and moving averages (kernel.window, kernel.moving_average)
- Composite oscillators and bands (kernel.oscillators, kernel.bands)
- Indicator modules producing time-aligned plots (indicators)
- DataFrame interop (data)
"""
__version__ = "0.1.0"
