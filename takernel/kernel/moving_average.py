"""
Moving-average family.

Every function takes a Series and a length and returns a Series of the same
length. Window averages (SMA, WMA, VWMA, ALMA) are NaN until their window is
full. Recursive averages run on pandas ``ewm(adjust=False)``:

- EMA: alpha = 2 / (length + 1), seeded with the first defined input
- RMA: alpha = 1 / length, seeded with the SMA of the first full window

An undefined input after seeding gives NaN at that bar and leaves the
accumulator untouched, so smoothing resumes on the next defined input.
"""
import math
import numpy as np
import pandas as pd
from typing import Optional, Union

from ..shared.errors import InvalidInputError, validate_length
from ..shared.types import MAType
from ..shared.defaults import ALMA_OFFSET, ALMA_SIGMA, VIDYA_CMO_PERIOD
from .series import Series
from .window import _place, _windows, rolling_sum


def _first_defined(values: np.ndarray) -> Optional[int]:
    defined = np.flatnonzero(~np.isnan(values))
    return int(defined[0]) if len(defined) else None


def _ewm(values: np.ndarray, alpha: float) -> np.ndarray:
    """
    Recursive mean y = y_prev + alpha * (x - y_prev), seeded with the first
    defined value. NaN inputs are skipped by the recursion and stay NaN in the
    output.
    """
    smoothed = (
        pd.Series(values)
        .ewm(alpha=alpha, adjust=False, ignore_na=True)
        .mean()
        .to_numpy(dtype=float, copy=True)
    )
    smoothed[np.isnan(values)] = np.nan
    return smoothed


def sma(series: Series, length: int) -> Series:
    """Simple moving average via a running window sum (O(N))."""
    length = validate_length(length)
    return series.derive(rolling_sum(series.values.tolist(), length) / length)


def ema(series: Series, length: int) -> Series:
    """Exponential moving average, alpha = 2 / (length + 1)."""
    length = validate_length(length)
    return series.derive(_ewm(series.values, 2.0 / (length + 1)))


def rma(series: Series, length: int) -> Series:
    """
    Wilder's smoothed moving average (SMMA), alpha = 1 / length.

    Seeded with the simple average of the first complete window, so the first
    defined output is at index length - 1 for a fully defined input. RSI and
    ATR depend on this seeding.

    A constant input is reproduced exactly only when the constant is exactly
    representable; rma([0.1] * 20, 3) seeds at 0.10000000000000002 because the
    window sum rounds.
    """
    length = validate_length(length)
    values = series.values
    sums = rolling_sum(values.tolist(), length)
    start = _first_defined(sums)
    seeded = np.full(len(values), np.nan)
    if start is not None:
        seeded[start:] = values[start:]
        seeded[start] = sums[start] / length
    return series.derive(_ewm(seeded, 1.0 / length))


smma = rma


def wma(series: Series, length: int) -> Series:
    """Linearly weighted average, weights 1 (oldest) .. length (newest)."""
    length = validate_length(length)
    weights = np.arange(1, length + 1, dtype=float)
    windows = _windows(series.values, length)
    return series.derive(_place(len(series), length, windows @ weights / weights.sum()))


def vwma(series: Series, length: int, volume: Series) -> Series:
    """
    Volume-weighted average: sum(src * volume) / sum(volume) over the window.

    A window whose volume sums to zero is undefined (NaN).
    """
    length = validate_length(length)
    weighted = rolling_sum((series * volume).values.tolist(), length)
    total_volume = rolling_sum(volume.values.tolist(), length)
    with np.errstate(divide="ignore", invalid="ignore"):
        out = weighted / total_volume
    out[total_volume == 0] = np.nan
    return series.derive(out)


def dema(series: Series, length: int) -> Series:
    """Double EMA: 2 * EMA - EMA(EMA)."""
    e1 = ema(series, length)
    return 2 * e1 - ema(e1, length)


def tema(series: Series, length: int) -> Series:
    """Triple EMA: 3 * E1 - 3 * E2 + E3."""
    e1 = ema(series, length)
    e2 = ema(e1, length)
    return 3 * e1 - 3 * e2 + ema(e2, length)


def zlema(series: Series, length: int) -> Series:
    """Zero-lag EMA: EMA of the source de-lagged by (length - 1) // 2 bars."""
    length = validate_length(length)
    lag = (length - 1) // 2
    return ema(series + (series - series.shift(lag)), length)


def hma(series: Series, length: int) -> Series:
    """Hull moving average: WMA(2 * WMA(n/2) - WMA(n), sqrt(n))."""
    length = validate_length(length)
    half = max(1, length // 2)
    root = max(1, int(math.floor(math.sqrt(length))))
    return wma(2 * wma(series, half) - wma(series, length), root)


def alma(
    series: Series,
    length: int,
    offset: float = ALMA_OFFSET,
    sigma: float = ALMA_SIGMA,
) -> Series:
    """
    Arnaud Legoux moving average: Gaussian weights centred at
    offset * (length - 1), width length / sigma.
    """
    length = validate_length(length)
    if sigma <= 0:
        raise InvalidInputError(f"sigma must be > 0, got {sigma}")
    m = offset * (length - 1)
    s = length / sigma
    idx = np.arange(length, dtype=float)
    weights = np.exp(-((idx - m) ** 2) / (2 * s * s))
    windows = _windows(series.values, length)
    return series.derive(_place(len(series), length, windows @ weights / weights.sum()))


def vidya(series: Series, length: int, cmo_length: int = VIDYA_CMO_PERIOD) -> Series:
    """
    Variable index dynamic average: an EMA whose alpha is scaled by |CMO| / 100.

    Seeded with the source value at the first bar where the CMO is defined.
    """
    from .oscillators import cmo

    length = validate_length(length)
    alpha = 2.0 / (length + 1)
    values = series.values.tolist()
    k = (abs(cmo(series, cmo_length)) / 100).values.tolist()
    out = np.full(len(values), np.nan)
    prev = np.nan
    for i, x in enumerate(values):
        if math.isnan(x) or math.isnan(k[i]):
            continue
        if math.isnan(prev):
            prev = x
        else:
            prev = prev + alpha * k[i] * (x - prev)
        out[i] = prev
    return series.derive(out)


_MA_FUNCTIONS = {
    MAType.SMA: sma,
    MAType.EMA: ema,
    MAType.RMA: rma,
    MAType.WMA: wma,
    MAType.DEMA: dema,
    MAType.TEMA: tema,
    MAType.HMA: hma,
    MAType.ZLEMA: zlema,
}


def resolve_ma_type(kind: Union[MAType, str]) -> MAType:
    """Accept an MAType, its display value ('SMMA (RMA)') or its name ('RMA')."""
    if isinstance(kind, MAType):
        return kind
    try:
        return MAType(kind)
    except ValueError:
        pass
    try:
        return MAType[str(kind).upper()]
    except KeyError:
        valid = [t.value for t in MAType]
        raise InvalidInputError(f"Unknown moving average type '{kind}'. Available: {valid}") from None


def ma(
    kind: Union[MAType, str],
    series: Series,
    length: int,
    volume: Optional[Series] = None,
) -> Series:
    """
    Dispatch to one moving average by type.

    Args:
        kind: MAType or its string form
        series: Source series
        length: Window / smoothing length
        volume: Required for VWMA
    """
    kind = resolve_ma_type(kind)
    if kind is MAType.VWMA:
        if volume is None:
            raise InvalidInputError("VWMA requires a volume series")
        return vwma(series, length, volume)
    return _MA_FUNCTIONS[kind](series, length)
