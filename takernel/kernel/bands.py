"""
Price bands and channels built from the kernel primitives.
"""
import math
import numpy as np
from typing import Sequence, Tuple, Union

from ..shared.defaults import (
    BB_PERIOD, BB_MULT,
    KC_PERIOD, KC_MULT,
    DONCHIAN_PERIOD,
    SUPERTREND_ATR_PERIOD, SUPERTREND_FACTOR,
)
from ..shared.types import Bar, SourceType
from .moving_average import ema, sma
from .oscillators import atr
from .series import Series, hlc, source_series
from .window import highest, lowest, stdev, true_range


def bb(series: Series, length: int = BB_PERIOD, mult: float = BB_MULT) -> Tuple[Series, Series, Series]:
    """
    Bollinger Bands.

    Returns:
        Tuple of (middle = SMA, middle + mult * stdev, middle - mult * stdev)
    """
    middle = sma(series, length)
    width = stdev(series, length) * mult
    return middle, middle + width, middle - width


def kc(
    bars: Sequence[Bar],
    source: Union[Series, SourceType, str] = SourceType.CLOSE,
    length: int = KC_PERIOD,
    mult: float = KC_MULT,
    use_true_range: bool = True,
) -> Tuple[Series, Series, Series]:
    """
    Keltner Channels.

    Returns:
        Tuple of (middle = EMA(source), upper, lower) where the band width is
        mult * EMA of true range (or of high - low).
    """
    src = source if isinstance(source, Series) else source_series(bars, source)
    high, low, _ = hlc(bars)
    spread = true_range(bars) if use_true_range else high - low
    middle = ema(src, length)
    width = ema(spread, length) * mult
    return middle, middle + width, middle - width


def donchian(bars: Sequence[Bar], length: int = DONCHIAN_PERIOD) -> Tuple[Series, Series, Series]:
    """
    Donchian Channels.

    Returns:
        Tuple of (middle, highest high, lowest low)
    """
    high, low, _ = hlc(bars)
    upper = highest(high, length)
    lower = lowest(low, length)
    return (upper + lower) / 2, upper, lower


def supertrend(
    bars: Sequence[Bar],
    factor: float = SUPERTREND_FACTOR,
    atr_length: int = SUPERTREND_ATR_PERIOD,
) -> Tuple[Series, Series]:
    """
    Supertrend trailing stop.

    Bands sit factor * ATR above and below hl2 and only ratchet toward price
    until the close breaks through them, which flips the direction.

    Returns:
        Tuple of (supertrend line, direction) with direction -1 in an uptrend
        (line is the lower band) and 1 in a downtrend (line is the upper band).
        Both are NaN until ATR is defined.
    """
    bars = list(bars)
    mid = source_series(bars, SourceType.HL2).values.tolist()
    close = [b.close for b in bars]
    atr_values = atr(bars, atr_length).values.tolist()
    n = len(bars)
    line = np.full(n, np.nan)
    direction = np.full(n, np.nan)

    final_upper = final_lower = math.nan
    prev_line = math.nan
    for i in range(n):
        a = atr_values[i]
        if math.isnan(a):
            continue
        upper = mid[i] + factor * a
        lower = mid[i] - factor * a
        prev_close = close[i - 1] if i > 0 else math.nan

        if not math.isnan(final_lower) and not (lower > final_lower or prev_close < final_lower):
            lower = final_lower
        if not math.isnan(final_upper) and not (upper < final_upper or prev_close > final_upper):
            upper = final_upper

        if math.isnan(prev_line):
            trend = 1.0
        elif prev_line == final_upper:
            trend = -1.0 if close[i] > upper else 1.0
        else:
            trend = 1.0 if close[i] < lower else -1.0

        final_upper, final_lower = upper, lower
        prev_line = lower if trend < 0 else upper
        line[i] = prev_line
        direction[i] = trend

    index = Series.from_bars(bars, lambda b: b.close)
    return index.derive(line), index.derive(direction)
