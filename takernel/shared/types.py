"""
Shared types for the kernel and the indicator modules.

Bars go in, IndicatorResult comes out. Everything here is plain value data:
bars are frozen, results are freshly built per calculation call.
"""
import math
import pandas as pd
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Bar:
    """One OHLCV sample. Volume is None when the feed has no volume."""
    time: Any
    open: float
    high: float
    low: float
    close: float
    volume: Optional[float] = None


class SourceType(Enum):
    """Price projections an indicator can be computed on."""
    OPEN = "open"
    HIGH = "high"
    LOW = "low"
    CLOSE = "close"
    VOLUME = "volume"
    HL2 = "hl2"
    HLC3 = "hlc3"
    OHLC4 = "ohlc4"
    HLCC4 = "hlcc4"


class MAType(Enum):
    """Moving-average kinds selectable by indicator inputs."""
    SMA = "SMA"
    EMA = "EMA"
    RMA = "SMMA (RMA)"
    WMA = "WMA"
    VWMA = "VWMA"
    DEMA = "DEMA"
    TEMA = "TEMA"
    HMA = "HMA"
    ZLEMA = "ZLEMA"


@dataclass
class PlotPoint:
    """A single time-stamped plot value; value is NaN where undefined."""
    time: Any
    value: float
    color: Optional[str] = None

    @property
    def is_defined(self) -> bool:
        return not math.isnan(self.value)


@dataclass
class FillData:
    """Shaded area between two plots (or hlines) referenced by id."""
    plot1: str
    plot2: str
    color: Optional[str] = None
    title: str = ""


@dataclass
class HLine:
    """Horizontal reference level (e.g. RSI 70/30 bands)."""
    id: str
    price: float
    title: str = ""


@dataclass
class IndicatorMetadata:
    title: str
    short_title: str
    overlay: bool = False


@dataclass
class IndicatorResult:
    """
    Output of one indicator calculation.

    Every plot holds exactly one PlotPoint per input bar, in bar order.
    """
    metadata: IndicatorMetadata
    plots: Dict[str, List[PlotPoint]] = field(default_factory=dict)
    fills: List[FillData] = field(default_factory=list)
    hlines: List[HLine] = field(default_factory=list)

    def values(self, plot_id: str) -> List[float]:
        """Plain value list for one plot."""
        return [p.value for p in self.plots[plot_id]]

    def to_frame(self) -> pd.DataFrame:
        """One column per plot, indexed by bar time."""
        if not self.plots:
            return pd.DataFrame()
        first = next(iter(self.plots.values()))
        index = pd.Index([p.time for p in first], name="time")
        return pd.DataFrame(
            {plot_id: [p.value for p in points] for plot_id, points in self.plots.items()},
            index=index,
        )
