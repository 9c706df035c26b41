"""
Conversion between OHLCV DataFrames and Bar sequences.

Accepts the usual frame shapes: capitalised ('Open', 'High', ...) or lowercase
column names, and the time either in a DatetimeIndex or in a 'time'/'Date'
column. Bars come out sorted by time.
"""
import logging
import pandas as pd
from typing import List, Optional, Sequence

from ..shared.errors import EmptySeriesError, InvalidInputError
from ..shared.types import Bar

logger = logging.getLogger(__name__)

_COLUMN_ALIASES = {
    "open": ["open", "Open", "OPEN", "o"],
    "high": ["high", "High", "HIGH", "h"],
    "low": ["low", "Low", "LOW", "l"],
    "close": ["close", "Close", "CLOSE", "c", "Adj Close", "adj_close"],
    "volume": ["volume", "Volume", "VOLUME", "vol", "v"],
}

_TIME_COLUMNS = ["time", "Time", "date", "Date", "datetime", "timestamp"]


def _find_column(df: pd.DataFrame, logical_name: str) -> Optional[str]:
    for name in _COLUMN_ALIASES[logical_name]:
        if name in df.columns:
            return name
    return None


def bars_from_frame(df: pd.DataFrame) -> List[Bar]:
    """
    Build bars from an OHLCV DataFrame.

    Args:
        df: Frame with open/high/low/close columns and optional volume

    Returns:
        Bars sorted by time

    Raises:
        EmptySeriesError: If the frame has no rows
        InvalidInputError: If a price column is missing
    """
    if len(df) == 0:
        raise EmptySeriesError("cannot build bars from an empty DataFrame")

    columns = {}
    for logical in ("open", "high", "low", "close"):
        col = _find_column(df, logical)
        if col is None:
            raise InvalidInputError(
                f"Required column '{logical}' not found in DataFrame columns: {df.columns.tolist()}"
            )
        columns[logical] = col
    volume_col = _find_column(df, "volume")
    if volume_col is None:
        logger.debug("No volume column; bars will carry volume=None")

    time_col = next((c for c in _TIME_COLUMNS if c in df.columns), None)
    frame = df.sort_values(time_col) if time_col else df.sort_index()
    times = frame[time_col].tolist() if time_col else frame.index.tolist()

    bars = []
    for pos, (_, row) in enumerate(frame.iterrows()):
        volume = None
        if volume_col is not None:
            raw = row[volume_col]
            volume = None if pd.isna(raw) else float(raw)
        bars.append(Bar(
            time=times[pos],
            open=float(row[columns["open"]]),
            high=float(row[columns["high"]]),
            low=float(row[columns["low"]]),
            close=float(row[columns["close"]]),
            volume=volume,
        ))
    return bars


def bars_to_frame(bars: Sequence[Bar]) -> pd.DataFrame:
    """Inverse of bars_from_frame: capitalised OHLCV columns indexed by time."""
    bars = list(bars)
    if not bars:
        raise EmptySeriesError("cannot build a DataFrame from an empty bar sequence")
    return pd.DataFrame(
        {
            "Open": [b.open for b in bars],
            "High": [b.high for b in bars],
            "Low": [b.low for b in bars],
            "Close": [b.close for b in bars],
            "Volume": [b.volume for b in bars],
        },
        index=pd.Index([b.time for b in bars], name="time"),
    )
