"""
The technical-analysis kernel.

Explicit namespace for every shared primitive, used as ``from takernel import
kernel as ta`` and then ``ta.sma(close, 20)``, ``ta.rsi(close, 14)``:

- Series and source projection
- Rolling-window primitives (highest, lowest, stdev, linreg, true range, ...)
- Moving averages (SMA, EMA, RMA, WMA, VWMA and composites)
- Composite oscillators (RSI, stochastic, ATR, CCI, MFI, MACD, ...)
- Bands and channels (Bollinger, Keltner, Donchian, Supertrend)

Every function is pure: no state survives between calls.
"""
from .series import Series, source_series, hlc, volume_series
from .window import (
    highest,
    lowest,
    stdev,
    linreg,
    true_range,
    sum,
    dev,
    change,
    mom,
    roc,
    highestbars,
    lowestbars,
    rising,
    falling,
    crossover,
    crossunder,
    cross,
    pivothigh,
    pivotlow,
    correlation,
    percentrank,
    cum,
)
from .moving_average import (
    sma,
    ema,
    rma,
    smma,
    wma,
    vwma,
    dema,
    tema,
    zlema,
    hma,
    alma,
    vidya,
    ma,
    resolve_ma_type,
)
from .oscillators import rsi, stoch, atr, cci, mfi, macd, cmo, tsi, williams_r
from .bands import bb, kc, donchian, supertrend

tr = true_range

__all__ = [
    'Series', 'source_series', 'hlc', 'volume_series',
    'highest', 'lowest', 'stdev', 'linreg', 'true_range', 'tr', 'sum', 'dev',
    'change', 'mom', 'roc', 'highestbars', 'lowestbars', 'rising', 'falling',
    'crossover', 'crossunder', 'cross', 'pivothigh', 'pivotlow',
    'correlation', 'percentrank', 'cum',
    'sma', 'ema', 'rma', 'smma', 'wma', 'vwma', 'dema', 'tema', 'zlema',
    'hma', 'alma', 'vidya', 'ma', 'resolve_ma_type',
    'rsi', 'stoch', 'atr', 'cci', 'mfi', 'macd', 'cmo', 'tsi', 'williams_r',
    'bb', 'kc', 'donchian', 'supertrend',
]
