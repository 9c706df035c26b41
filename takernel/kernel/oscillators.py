"""
Composite oscillator builders.

Each builder is a fixed pipeline over the window primitives and moving
averages. Zero denominators never raise; each builder resolves them to a
fixed value:

- RSI / MFI: no losses -> 100, else no gains -> 0
- Stochastic %K: zero high-low range -> 0
- CCI: zero mean deviation -> 0
- CMO / TSI: no movement -> 0
- Williams %R: zero high-low range -> -50
"""
import numpy as np
from typing import Sequence, Tuple

from ..shared.defaults import (
    CCI_CONSTANT, CMO_PERIOD,
    MACD_FAST, MACD_SLOW, MACD_SIGNAL,
    TSI_SHORT, TSI_LONG,
)
from ..shared.errors import validate_length
from ..shared.types import Bar
from .moving_average import ema, rma, sma
from .series import Series
from .window import change, dev, highest, lowest, rolling_sum, true_range


def _undefined_where(result: np.ndarray, *inputs: np.ndarray) -> np.ndarray:
    mask = np.zeros(len(result), dtype=bool)
    for arr in inputs:
        mask |= np.isnan(arr)
    result[mask] = np.nan
    return result


def _movement(series: Series) -> np.ndarray:
    """
    Bar-to-bar change where a defined bar without a defined predecessor
    (the first bar, or the first bar after a gap) counts as no movement.
    """
    values = series.values
    previous = series.shift(1).values
    move = values - previous
    move[~np.isnan(values) & np.isnan(previous)] = 0.0
    return move


def _strength_index(up: Series, down: Series) -> Series:
    """100 - 100 / (1 + up / down) with the RSI edge conventions."""
    u, d = up.values, down.values
    with np.errstate(divide="ignore", invalid="ignore"):
        ratio = 100.0 - 100.0 / (1.0 + u / d)
    result = np.where(d == 0, 100.0, np.where(u == 0, 0.0, ratio))
    return up.derive(_undefined_where(result, u, d))


def rsi(series: Series, length: int) -> Series:
    """
    Relative Strength Index.

    RSI = 100 - 100 / (1 + RMA(gains) / RMA(losses))
    """
    length = validate_length(length)
    move = _movement(series)
    gains = series.derive(np.maximum(move, 0.0))
    losses = series.derive(np.maximum(-move, 0.0))
    return _strength_index(rma(gains, length), rma(losses, length))


def stoch(close: Series, high: Series, low: Series, length: int) -> Series:
    """Raw stochastic %K = 100 * (close - lowest low) / (highest high - lowest low)."""
    length = validate_length(length)
    hh = highest(high, length).values
    ll = lowest(low, length).values
    c = close.values
    span = hh - ll
    with np.errstate(divide="ignore", invalid="ignore"):
        k = np.where(span == 0, 0.0, 100.0 * (c - ll) / span)
    return close.derive(_undefined_where(k, hh, ll, c))


def atr(bars: Sequence[Bar], length: int) -> Series:
    """Average True Range: RMA of true range."""
    return rma(true_range(bars), length)


def cci(series: Series, length: int, constant: float = CCI_CONSTANT) -> Series:
    """Commodity Channel Index: (x - SMA) / (constant * mean absolute deviation)."""
    length = validate_length(length)
    mean = sma(series, length).values
    deviation = dev(series, length).values
    x = series.values
    # a flat window leaves only rounding noise in both the deviation and x - mean
    with np.errstate(invalid="ignore"):
        flat = np.isclose(deviation, 0.0, rtol=0.0, atol=1e-12 * np.maximum(np.abs(mean), 1.0))
    with np.errstate(divide="ignore", invalid="ignore"):
        result = np.where(flat, 0.0, (x - mean) / (constant * deviation))
    return series.derive(_undefined_where(result, mean, deviation, x))


def mfi(series: Series, length: int, volume: Series) -> Series:
    """
    Money Flow Index over a typical-price series (normally hlc3).

    Raw money flow (price * volume) counts as positive on bars where the price
    rose and negative where it fell; unchanged and first bars count as neither.
    Each side is RMA-smoothed and remapped to 0-100 like RSI.
    """
    length = validate_length(length)
    move = _movement(series)
    raw = (series * volume).values
    positive = np.where(move > 0, raw, 0.0)
    negative = np.where(move < 0, raw, 0.0)
    positive = _undefined_where(positive, move, raw)
    negative = _undefined_where(negative, move, raw)
    return _strength_index(
        rma(series.derive(positive), length),
        rma(series.derive(negative), length),
    )


def macd(
    series: Series,
    fast: int = MACD_FAST,
    slow: int = MACD_SLOW,
    signal: int = MACD_SIGNAL,
) -> Tuple[Series, Series, Series]:
    """
    MACD line, signal line and histogram.

    Returns:
        Tuple of (EMA(fast) - EMA(slow), EMA of that line, line - signal)
    """
    line = ema(series, fast) - ema(series, slow)
    signal_line = ema(line, signal)
    return line, signal_line, line - signal_line


def cmo(series: Series, length: int = CMO_PERIOD) -> Series:
    """Chande Momentum Oscillator: 100 * (up - down) / (up + down) over the window."""
    length = validate_length(length)
    move = change(series, 1).values
    up = rolling_sum(np.maximum(move, 0.0).tolist(), length)
    down = rolling_sum(np.maximum(-move, 0.0).tolist(), length)
    total = up + down
    with np.errstate(divide="ignore", invalid="ignore"):
        result = np.where(total == 0, 0.0, 100.0 * (up - down) / total)
    return series.derive(_undefined_where(result, up, down))


def tsi(series: Series, short: int = TSI_SHORT, long: int = TSI_LONG) -> Series:
    """True Strength Index: 100 * double-smoothed momentum / double-smoothed |momentum|."""
    move = change(series, 1)
    numerator = ema(ema(move, long), short).values
    denominator = ema(ema(abs(move), long), short).values
    with np.errstate(divide="ignore", invalid="ignore"):
        result = np.where(denominator == 0, 0.0, 100.0 * numerator / denominator)
    return series.derive(_undefined_where(result, numerator, denominator))


def williams_r(close: Series, high: Series, low: Series, length: int) -> Series:
    """Williams %R = -100 * (highest high - close) / (highest high - lowest low)."""
    length = validate_length(length)
    hh = highest(high, length).values
    ll = lowest(low, length).values
    c = close.values
    span = hh - ll
    with np.errstate(divide="ignore", invalid="ignore"):
        result = np.where(span == 0, -50.0, -100.0 * (hh - c) / span)
    return close.derive(_undefined_where(result, hh, ll, c))
