"""
Rolling-window primitives.

For output index i and length L every primitive looks at input indices
[i-L+1, i]. Before index L-1 the window is incomplete and the output is NaN;
a window containing any NaN also yields NaN. Lengths are validated up front
and an invalid length raises InvalidLengthError; insufficient history never
raises.
"""
import math
import numpy as np
import pandas as pd
from numpy.lib.stride_tricks import sliding_window_view
from typing import Sequence

from ..shared.errors import SeriesAlignmentError, validate_length
from ..shared.types import Bar
from .series import Series, hlc


def _windows(values: np.ndarray, length: int) -> np.ndarray:
    """(N-L+1, L) view of every complete trailing window; empty if L > N."""
    if length > len(values):
        return np.empty((0, length))
    return sliding_window_view(values, length)


def _place(n: int, length: int, window_values: np.ndarray) -> np.ndarray:
    """Put per-window results at indices L-1..N-1, NaN before."""
    out = np.full(n, np.nan)
    if len(window_values):
        out[length - 1:] = window_values
    return out


def rolling_sum(values: Sequence[float], length: int) -> np.ndarray:
    """
    Trailing sum by a running total: add the entering value, subtract the
    leaving one. O(N) regardless of length.

    NaNs are counted rather than summed so a window is undefined exactly while
    it contains one, and the running total recovers once it leaves.
    """
    vals = list(values)
    n = len(vals)
    out = np.full(n, np.nan)
    total = 0.0
    nan_count = 0
    for i in range(n):
        entering = vals[i]
        if math.isnan(entering):
            nan_count += 1
        else:
            total += entering
        if i >= length:
            leaving = vals[i - length]
            if math.isnan(leaving):
                nan_count -= 1
            else:
                total -= leaving
        if i >= length - 1 and nan_count == 0:
            out[i] = total
    return out


def _pandas_rolling(series: Series, length: int):
    return pd.Series(series.values).rolling(length, min_periods=length)


def highest(series: Series, length: int) -> Series:
    """Highest value of the trailing window."""
    length = validate_length(length)
    return series.derive(_pandas_rolling(series, length).max().to_numpy())


def lowest(series: Series, length: int) -> Series:
    """Lowest value of the trailing window."""
    length = validate_length(length)
    return series.derive(_pandas_rolling(series, length).min().to_numpy())


def stdev(series: Series, length: int) -> Series:
    """Population standard deviation (divides by length, not length - 1)."""
    length = validate_length(length)
    windows = _windows(series.values, length)
    return series.derive(_place(len(series), length, np.std(windows, axis=1)))


def sum(series: Series, length: int) -> Series:  # noqa: A001
    """Trailing sum over the window."""
    length = validate_length(length)
    return series.derive(rolling_sum(series.values.tolist(), length))


def dev(series: Series, length: int) -> Series:
    """Mean absolute deviation from the window mean."""
    length = validate_length(length)
    windows = _windows(series.values, length)
    means = windows.mean(axis=1, keepdims=True)
    return series.derive(_place(len(series), length, np.abs(windows - means).mean(axis=1)))


def linreg(series: Series, length: int, offset: int = 0) -> Series:
    """
    Least-squares line over the trailing window, evaluated at its last point
    shifted back by `offset` bars.

    x runs 0 (oldest) .. length-1 (newest).
    """
    length = validate_length(length)
    windows = _windows(series.values, length)
    if length == 1:
        return series.derive(series.values)
    x = np.arange(length, dtype=float)
    sum_x = x.sum()
    sum_xx = (x * x).sum()
    sum_y = windows.sum(axis=1)
    sum_xy = windows @ x
    slope = (length * sum_xy - sum_x * sum_y) / (length * sum_xx - sum_x * sum_x)
    intercept = (sum_y - slope * sum_x) / length
    fitted = intercept + slope * (length - 1 - offset)
    return series.derive(_place(len(series), length, fitted))


def _true_range(high: np.ndarray, low: np.ndarray, close: np.ndarray) -> np.ndarray:
    prev_close = np.concatenate(([np.nan], close[:-1]))
    hl = high - low
    with np.errstate(invalid="ignore"):
        tr = np.fmax(hl, np.fmax(np.abs(high - prev_close), np.abs(low - prev_close)))
    # fmax ignores the NaN previous close on the first bar, leaving high - low
    tr[np.isnan(hl)] = np.nan
    return tr


def true_range(bars: Sequence[Bar]) -> Series:
    """
    max(high - low, |high - prev close|, |low - prev close|).

    The first bar has no previous close and reduces to high - low.
    """
    high, low, close = hlc(bars)
    return high.derive(_true_range(high.values, low.values, close.values))


def change(series: Series, length: int = 1) -> Series:
    """x[i] - x[i - length]."""
    length = validate_length(length)
    return series - series.shift(length)


mom = change


def roc(series: Series, length: int) -> Series:
    """Rate of change in percent; a zero base value gives NaN."""
    length = validate_length(length)
    base = series.shift(length)
    return (series - base) / base * 100


def _extremum_bars(series: Series, length: int, pick) -> Series:
    windows = _windows(series.values, length)
    if not len(windows):
        return series.derive(np.full(len(series), np.nan))
    # reversed so ties resolve to the most recent bar
    idx_from_end = pick(windows[:, ::-1], axis=1)
    offsets = -idx_from_end.astype(float)
    offsets[np.isnan(windows).any(axis=1)] = np.nan
    return series.derive(_place(len(series), length, offsets))


def highestbars(series: Series, length: int) -> Series:
    """Offset (0 or negative) from the current bar to the window's highest value."""
    length = validate_length(length)
    return _extremum_bars(series, length, np.argmax)


def lowestbars(series: Series, length: int) -> Series:
    """Offset (0 or negative) from the current bar to the window's lowest value."""
    length = validate_length(length)
    return _extremum_bars(series, length, np.argmin)


def _directional(series: Series, length: int, op) -> Series:
    vals = series.values
    windows = _windows(vals, length + 1)
    if not len(windows):
        return series.derive(np.full(len(series), np.nan))
    current = windows[:, -1:]
    previous = windows[:, :-1]
    with np.errstate(invalid="ignore"):
        result = op(current, previous).all(axis=1).astype(float)
    result[np.isnan(windows).any(axis=1)] = np.nan
    return series.derive(_place(len(series), length + 1, result))


def rising(series: Series, length: int) -> Series:
    """1.0 where the value is strictly above each of the previous `length` values."""
    length = validate_length(length)
    return _directional(series, length, np.greater)


def falling(series: Series, length: int) -> Series:
    """1.0 where the value is strictly below each of the previous `length` values."""
    length = validate_length(length)
    return _directional(series, length, np.less)


def crossover(a: Series, b: Series) -> Series:
    """1.0 on the bar where a moves from at-or-below b to above it."""
    return (a > b) * (a.shift(1) <= b.shift(1))


def crossunder(a: Series, b: Series) -> Series:
    """1.0 on the bar where a moves from at-or-above b to below it."""
    return (a < b) * (a.shift(1) >= b.shift(1))


def cross(a: Series, b: Series) -> Series:
    return crossover(a, b) + crossunder(a, b)


def _pivot(series: Series, left: int, right: int, op) -> Series:
    vals = series.values
    n = len(vals)
    out = np.full(n, np.nan)
    span = left + right + 1
    for i in range(span - 1, n):
        center = i - right
        candidate = vals[center]
        if math.isnan(candidate):
            continue
        neighbours = np.concatenate((vals[center - left:center], vals[center + 1:i + 1]))
        if np.isnan(neighbours).any():
            continue
        if op(candidate, neighbours).all():
            out[i] = candidate
    return series.derive(out)


def pivothigh(series: Series, left: int, right: int) -> Series:
    """
    Swing high confirmed `right` bars after it happened.

    The value at index i is series[i - right] when that bar is strictly higher
    than the `left` bars before it and the `right` bars after it; NaN
    elsewhere.
    """
    left = validate_length(left, "left", minimum=0)
    right = validate_length(right, "right", minimum=0)
    return _pivot(series, left, right, np.greater)


def pivotlow(series: Series, left: int, right: int) -> Series:
    """Swing low counterpart of pivothigh."""
    left = validate_length(left, "left", minimum=0)
    right = validate_length(right, "right", minimum=0)
    return _pivot(series, left, right, np.less)


def correlation(a: Series, b: Series, length: int) -> Series:
    """Pearson correlation over the trailing window; zero variance gives NaN."""
    length = validate_length(length)
    if len(a) != len(b):
        raise SeriesAlignmentError(f"cannot correlate Series of length {len(a)} with length {len(b)}")
    wa = _windows(a.values, length)
    wb = _windows(b.values, length)
    if not len(wa):
        return a.derive(np.full(len(a), np.nan))
    da = wa - wa.mean(axis=1, keepdims=True)
    db = wb - wb.mean(axis=1, keepdims=True)
    denom = np.sqrt((da * da).sum(axis=1) * (db * db).sum(axis=1))
    with np.errstate(divide="ignore", invalid="ignore"):
        corr = (da * db).sum(axis=1) / denom
    corr[denom == 0] = np.nan
    return a.derive(_place(len(a), length, corr))


def percentrank(series: Series, length: int) -> Series:
    """Percent of the previous `length` values that are <= the current value."""
    length = validate_length(length)
    windows = _windows(series.values, length + 1)
    if not len(windows):
        return series.derive(np.full(len(series), np.nan))
    current = windows[:, -1:]
    with np.errstate(invalid="ignore"):
        rank = (windows[:, :-1] <= current).sum(axis=1) / length * 100.0
    rank[np.isnan(windows).any(axis=1)] = np.nan
    return series.derive(_place(len(series), length + 1, rank))


def cum(series: Series) -> Series:
    """Cumulative sum with undefined values counted as zero."""
    return series.derive(np.cumsum(np.nan_to_num(series.values, nan=0.0)))
