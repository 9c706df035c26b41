"""
Time-aligned numeric Series.

A Series holds one float per bar, index-aligned with the bars it was derived
from. NaN is the only "undefined" sentinel: None in raw input becomes NaN at
construction and every operation propagates it.

Series are immutable. Every transform returns a new Series on the same
timestamps; the underlying arrays are never shared writable.
"""
import numpy as np
import pandas as pd
from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple, Union

from ..shared.errors import EmptySeriesError, InvalidInputError, SeriesAlignmentError
from ..shared.types import Bar, SourceType

Operand = Union["Series", float, int]


def _times_of(source: Any) -> pd.Index:
    """Timestamps from a bar sequence, a pandas index or a plain sequence."""
    if isinstance(source, pd.Index):
        return source
    if isinstance(source, (pd.Series, pd.DataFrame)):
        return source.index
    items = list(source)
    if items and isinstance(items[0], Bar):
        return pd.Index([bar.time for bar in items])
    return pd.Index(items)


class Series:
    """Immutable float sequence aligned to bar timestamps."""

    __slots__ = ("_values", "_index")

    def __init__(self, values: Sequence[Optional[float]], index: pd.Index):
        arr = np.array(values, dtype=float)
        if arr.ndim != 1:
            raise SeriesAlignmentError(f"Series values must be one-dimensional, got shape {arr.shape}")
        if len(arr) == 0:
            raise EmptySeriesError("Series requires at least one bar")
        if len(index) != len(arr):
            raise SeriesAlignmentError(
                f"values ({len(arr)}) and timestamps ({len(index)}) must have the same length"
            )
        arr.setflags(write=False)
        self._values = arr
        self._index = index

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_bars(cls, bars: Sequence[Bar], extractor: Callable[[Bar], Optional[float]]) -> "Series":
        """Project one value per bar, e.g. ``Series.from_bars(bars, lambda b: b.close)``."""
        bars = list(bars)
        if not bars:
            raise EmptySeriesError("cannot build a Series from an empty bar sequence")
        return cls([extractor(bar) for bar in bars], pd.Index([bar.time for bar in bars]))

    @classmethod
    def from_values(cls, values: Sequence[Optional[float]], times: Any) -> "Series":
        """
        Pair a raw value array with timestamps.

        Args:
            values: One value per bar (None or NaN for undefined)
            times: Bars, a pandas index/Series, or a plain sequence of timestamps
        """
        return cls(values, _times_of(times))

    @classmethod
    def from_pandas(cls, data: pd.Series) -> "Series":
        return cls(data.to_numpy(dtype=float, na_value=np.nan), data.index)

    def derive(self, values: Sequence[Optional[float]]) -> "Series":
        """New Series with the given values on this Series' timestamps."""
        return Series(values, self._index)

    def map(self, fn: Callable[[float], float]) -> "Series":
        """Apply fn to every defined element; undefined stays undefined."""
        return self.derive([np.nan if np.isnan(v) else fn(v) for v in self._values.tolist()])

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    @property
    def times(self) -> pd.Index:
        return self._index

    @property
    def values(self) -> np.ndarray:
        """Read-only view of the values."""
        return self._values

    def __len__(self) -> int:
        return len(self._values)

    def __getitem__(self, i: int) -> float:
        return float(self._values[i])

    def __iter__(self) -> Iterator[float]:
        return iter(self._values.tolist())

    def __repr__(self) -> str:
        return f"Series(len={len(self)}, values={self._values!r})"

    def to_list(self) -> List[float]:
        return self._values.tolist()

    def to_numpy(self) -> np.ndarray:
        """Writable copy of the values."""
        return self._values.copy()

    def to_pandas(self) -> pd.Series:
        return pd.Series(self._values.copy(), index=self._index)

    def is_defined(self) -> np.ndarray:
        """Boolean mask of defined (non-NaN) positions."""
        return ~np.isnan(self._values)

    def equals(self, other: "Series") -> bool:
        """Bit-for-bit equality, NaN equal to NaN in the same position."""
        if not isinstance(other, Series) or len(other) != len(self):
            return False
        return bool(np.array_equal(self._values, other._values, equal_nan=True))

    # ------------------------------------------------------------------
    # Elementwise operations
    # ------------------------------------------------------------------

    def _operand(self, other: Operand) -> np.ndarray:
        if isinstance(other, Series):
            if len(other) != len(self):
                raise SeriesAlignmentError(
                    f"cannot combine Series of length {len(self)} with length {len(other)}"
                )
            return other._values
        return np.full(len(self), float(other))

    def _arith(self, other: Operand, op: Callable, reflected: bool = False) -> "Series":
        a, b = self._values, self._operand(other)
        if reflected:
            a, b = b, a
        with np.errstate(invalid="ignore", over="ignore"):
            return self.derive(op(a, b))

    def __add__(self, other: Operand) -> "Series":
        return self._arith(other, np.add)

    def __radd__(self, other: Operand) -> "Series":
        return self._arith(other, np.add, reflected=True)

    def __sub__(self, other: Operand) -> "Series":
        return self._arith(other, np.subtract)

    def __rsub__(self, other: Operand) -> "Series":
        return self._arith(other, np.subtract, reflected=True)

    def __mul__(self, other: Operand) -> "Series":
        return self._arith(other, np.multiply)

    def __rmul__(self, other: Operand) -> "Series":
        return self._arith(other, np.multiply, reflected=True)

    def __truediv__(self, other: Operand) -> "Series":
        return self._arith(other, _safe_divide)

    def __rtruediv__(self, other: Operand) -> "Series":
        return self._arith(other, _safe_divide, reflected=True)

    def __neg__(self) -> "Series":
        return self.derive(-self._values)

    def __abs__(self) -> "Series":
        return self.derive(np.abs(self._values))

    def _compare(self, other: Operand, op: Callable) -> "Series":
        a, b = self._values, self._operand(other)
        undefined = np.isnan(a) | np.isnan(b)
        with np.errstate(invalid="ignore"):
            result = op(a, b).astype(float)
        result[undefined] = np.nan
        return self.derive(result)

    def __lt__(self, other: Operand) -> "Series":
        return self._compare(other, np.less)

    def __le__(self, other: Operand) -> "Series":
        return self._compare(other, np.less_equal)

    def __gt__(self, other: Operand) -> "Series":
        return self._compare(other, np.greater)

    def __ge__(self, other: Operand) -> "Series":
        return self._compare(other, np.greater_equal)

    def __eq__(self, other: Operand) -> "Series":  # type: ignore[override]
        return self._compare(other, np.equal)

    def __ne__(self, other: Operand) -> "Series":  # type: ignore[override]
        return self._compare(other, np.not_equal)

    __hash__ = None  # type: ignore[assignment]

    def shift(self, periods: int = 1) -> "Series":
        """Value from `periods` bars ago (NaN where that bar does not exist)."""
        out = np.full(len(self), np.nan)
        if periods == 0:
            out[:] = self._values
        elif 0 < periods < len(self):
            out[periods:] = self._values[:-periods]
        elif -len(self) < periods < 0:
            out[:periods] = self._values[-periods:]
        return self.derive(out)

    def fillna(self, value: float) -> "Series":
        out = self.to_numpy()
        out[np.isnan(out)] = value
        return self.derive(out)


_SOURCE_EXTRACTORS = {
    SourceType.OPEN: lambda b: b.open,
    SourceType.HIGH: lambda b: b.high,
    SourceType.LOW: lambda b: b.low,
    SourceType.CLOSE: lambda b: b.close,
    SourceType.VOLUME: lambda b: b.volume if b.volume is not None else 0.0,
    SourceType.HL2: lambda b: (b.high + b.low) / 2,
    SourceType.HLC3: lambda b: (b.high + b.low + b.close) / 3,
    SourceType.OHLC4: lambda b: (b.open + b.high + b.low + b.close) / 4,
    SourceType.HLCC4: lambda b: (b.high + b.low + 2 * b.close) / 4,
}


def source_series(bars: Sequence[Bar], source: Union[SourceType, str] = SourceType.CLOSE) -> Series:
    """
    Project a price source out of the bars.

    Args:
        bars: Bar sequence (non-empty)
        source: SourceType or its string value ('close', 'hlc3', ...)

    Absent volume counts as 0.
    """
    try:
        source = SourceType(source)
    except ValueError:
        valid = [s.value for s in SourceType]
        raise InvalidInputError(f"Unknown source '{source}'. Available: {valid}") from None
    return Series.from_bars(bars, _SOURCE_EXTRACTORS[source])


def hlc(bars: Sequence[Bar]) -> Tuple[Series, Series, Series]:
    """High, low and close Series for the bars."""
    bars = list(bars)
    high = Series.from_bars(bars, lambda b: b.high)
    return high, high.derive([b.low for b in bars]), high.derive([b.close for b in bars])


def volume_series(bars: Sequence[Bar]) -> Series:
    return source_series(bars, SourceType.VOLUME)


def _safe_divide(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """a / b with a zero denominator giving NaN instead of inf."""
    with np.errstate(divide="ignore", invalid="ignore"):
        result = np.true_divide(a, b)
    result[b == 0] = np.nan
    return result
