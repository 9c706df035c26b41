"""
Individual indicator implementations following the Indicator interface.

Each class is a thin client of the kernel: it projects its source, composes
kernel primitives and maps the result into plots. None of them holds state
beyond its validated inputs.
"""
import logging
import math
import numpy as np
from typing import List, Optional, Sequence, Tuple

from .. import kernel as ta
from ..kernel.series import Series, source_series, volume_series
from ..shared.types import Bar, FillData, HLine, IndicatorMetadata, IndicatorResult, MAType, PlotPoint
from .base import Indicator, plot_points
from .config import (
    MA_NONE, MA_SMA_BB,
    SMAInputs, EMAInputs, WMAInputs, VWMAInputs, MACrossInputs,
    RSIInputs, StochasticInputs, CCIInputs, MFIInputs, ATRInputs,
    MACDInputs, BBInputs, SupertrendInputs, WilliamsRInputs, OBVInputs, ROCInputs,
)

logger = logging.getLogger(__name__)

MACD_COLORS = {
    "above_rising": "#26A69A",
    "above_falling": "#B2DFDB",
    "below_rising": "#FFCDD2",
    "below_falling": "#FF5252",
}


def _warn_if_no_volume(indicator_id: str, bars: Sequence[Bar]) -> None:
    if all(b.volume is None for b in bars):
        logger.warning("%s: bars carry no volume; volume is treated as 0", indicator_id)


def _smoothing_plots(
    bars: Sequence[Bar],
    line: Series,
    ma_type: str,
    ma_length: int,
    bb_mult: float,
) -> Tuple[List[PlotPoint], List[PlotPoint], List[PlotPoint], List[FillData]]:
    """Optional moving average (and Bollinger envelope) drawn over an oscillator line."""
    empty = [math.nan] * len(bars)
    if ma_type == MA_NONE:
        return plot_points(bars, empty), plot_points(bars, empty), plot_points(bars, empty), []

    kind = MAType.SMA if ma_type == MA_SMA_BB else ta.resolve_ma_type(ma_type)
    smoothed = ta.ma(kind, line, ma_length, volume=volume_series(bars))
    if ma_type != MA_SMA_BB:
        return plot_points(bars, smoothed), plot_points(bars, empty), plot_points(bars, empty), []

    width = ta.stdev(line, ma_length) * bb_mult
    fills = [FillData(plot1="plot2", plot2="plot3", color="#089981", title="BB Background")]
    return (
        plot_points(bars, smoothed),
        plot_points(bars, smoothed + width),
        plot_points(bars, smoothed - width),
        fills,
    )


class _MovingAverageOverlay(Indicator):
    """Single moving-average line over a price source."""

    ma_type: MAType = MAType.SMA

    def calculate(self, bars: Sequence[Bar]) -> IndicatorResult:
        source = source_series(bars, self.inputs.source)
        volume = None
        if self.ma_type is MAType.VWMA:
            _warn_if_no_volume(self.id, bars)
            volume = volume_series(bars)
        line = ta.ma(self.ma_type, source, self.inputs.length, volume=volume)
        return self.result({"plot0": plot_points(bars, line, offset=self.inputs.offset)})


class SMAIndicator(_MovingAverageOverlay):
    """Simple Moving Average."""
    id = "sma"
    name = "Simple Moving Average (SMA)"
    category = "Moving Averages"
    description = "Arithmetic mean of the source over a trailing window."
    metadata = IndicatorMetadata(title="Moving Average Simple", short_title="SMA", overlay=True)
    inputs_class = SMAInputs
    ma_type = MAType.SMA


class EMAIndicator(_MovingAverageOverlay):
    """Exponential Moving Average."""
    id = "ema"
    name = "Exponential Moving Average (EMA)"
    category = "Moving Averages"
    description = "Exponentially weighted average giving more weight to recent bars."
    metadata = IndicatorMetadata(title="Moving Average Exponential", short_title="EMA", overlay=True)
    inputs_class = EMAInputs
    ma_type = MAType.EMA


class WMAIndicator(_MovingAverageOverlay):
    """Weighted Moving Average."""
    id = "wma"
    name = "Weighted Moving Average (WMA)"
    category = "Moving Averages"
    description = "Linearly weighted average, newest bar weighted most."
    metadata = IndicatorMetadata(title="Moving Average Weighted", short_title="WMA", overlay=True)
    inputs_class = WMAInputs
    ma_type = MAType.WMA


class VWMAIndicator(_MovingAverageOverlay):
    """Volume Weighted Moving Average."""
    id = "vwma"
    name = "Volume Weighted Moving Average (VWMA)"
    category = "Moving Averages"
    description = "Average of the source weighted by bar volume."
    metadata = IndicatorMetadata(title="Volume Weighted Moving Average", short_title="VWMA", overlay=True)
    inputs_class = VWMAInputs
    ma_type = MAType.VWMA


class MACrossIndicator(Indicator):
    """Two SMAs of the close plus a marker where they cross."""
    id = "ma-cross"
    name = "MA Cross"
    category = "Moving Averages"
    description = "Short and long SMA with crossover markers."
    metadata = IndicatorMetadata(title="MA Cross", short_title="MA Cross", overlay=True)
    inputs_class = MACrossInputs

    def calculate(self, bars: Sequence[Bar]) -> IndicatorResult:
        close = source_series(bars, "close")
        short_ma = ta.sma(close, self.inputs.short_length)
        long_ma = ta.sma(close, self.inputs.long_length)
        crossed = ta.cross(short_ma, long_ma).values
        # marker sits on the short MA at the crossing bar
        markers = np.where(crossed == 1.0, short_ma.values, np.nan)
        return self.result({
            "plot0": plot_points(bars, short_ma),
            "plot1": plot_points(bars, long_ma),
            "plot2": plot_points(bars, markers),
        })


class RSIIndicator(Indicator):
    """Relative Strength Index with optional smoothing line."""
    id = "rsi"
    name = "Relative Strength Index (RSI)"
    category = "Oscillators"
    description = "Momentum oscillator comparing Wilder-smoothed gains and losses."
    metadata = IndicatorMetadata(title="Relative Strength Index", short_title="RSI", overlay=False)
    inputs_class = RSIInputs

    def calculate(self, bars: Sequence[Bar]) -> IndicatorResult:
        source = source_series(bars, self.inputs.source)
        rsi = ta.rsi(source, self.inputs.length)
        ma_plot, upper, lower, fills = _smoothing_plots(
            bars, rsi, self.inputs.ma_type, self.inputs.ma_length, self.inputs.bb_mult
        )
        hlines = [
            HLine(id="hline_upper", price=self.inputs.overbought, title="RSI Upper Band"),
            HLine(id="hline_mid", price=50, title="RSI Middle Band"),
            HLine(id="hline_lower", price=self.inputs.oversold, title="RSI Lower Band"),
        ]
        fills = [FillData(plot1="hline_upper", plot2="hline_lower", color="#2962FF1A")] + fills
        return self.result(
            {"plot0": plot_points(bars, rsi), "plot1": ma_plot, "plot2": upper, "plot3": lower},
            fills=fills,
            hlines=hlines,
        )


class StochasticIndicator(Indicator):
    """Stochastic %K (optionally smoothed) and its %D signal."""
    id = "stoch"
    name = "Stochastic"
    category = "Oscillators"
    description = "Position of the close within the recent high-low range."
    metadata = IndicatorMetadata(title="Stochastic", short_title="Stoch", overlay=False)
    inputs_class = StochasticInputs

    def calculate(self, bars: Sequence[Bar]) -> IndicatorResult:
        high, low, close = ta.hlc(bars)
        raw = ta.stoch(close, high, low, self.inputs.period_k)
        k = ta.sma(raw, self.inputs.smooth_k)
        d = ta.sma(k, self.inputs.period_d)
        hlines = [
            HLine(id="hline_upper", price=self.inputs.overbought, title="Upper Band"),
            HLine(id="hline_mid", price=50, title="Middle Band"),
            HLine(id="hline_lower", price=self.inputs.oversold, title="Lower Band"),
        ]
        return self.result(
            {"plot0": plot_points(bars, k), "plot1": plot_points(bars, d)},
            fills=[FillData(plot1="hline_upper", plot2="hline_lower", color="#2962FF1A")],
            hlines=hlines,
        )


class CCIIndicator(Indicator):
    """Commodity Channel Index."""
    id = "cci"
    name = "Commodity Channel Index (CCI)"
    category = "Oscillators"
    description = "Distance of price from its mean in units of mean deviation."
    metadata = IndicatorMetadata(title="Commodity Channel Index", short_title="CCI", overlay=False)
    inputs_class = CCIInputs

    def calculate(self, bars: Sequence[Bar]) -> IndicatorResult:
        cci = ta.cci(source_series(bars, self.inputs.source), self.inputs.length)
        hlines = [
            HLine(id="hline_upper", price=100, title="Upper Band"),
            HLine(id="hline_mid", price=0, title="Middle Band"),
            HLine(id="hline_lower", price=-100, title="Lower Band"),
        ]
        return self.result(
            {"plot0": plot_points(bars, cci)},
            fills=[FillData(plot1="hline_upper", plot2="hline_lower", color="#2962FF1A")],
            hlines=hlines,
        )


class MFIIndicator(Indicator):
    """Money Flow Index."""
    id = "mfi"
    name = "Money Flow Index (MFI)"
    category = "Volume"
    description = "Volume-weighted RSI computed on the typical price."
    metadata = IndicatorMetadata(title="Money Flow Index", short_title="MFI", overlay=False)
    inputs_class = MFIInputs

    def calculate(self, bars: Sequence[Bar]) -> IndicatorResult:
        _warn_if_no_volume(self.id, bars)
        mfi = ta.mfi(source_series(bars, "hlc3"), self.inputs.length, volume_series(bars))
        hlines = [
            HLine(id="hline_upper", price=80, title="Overbought"),
            HLine(id="hline_mid", price=50, title="Middle Band"),
            HLine(id="hline_lower", price=20, title="Oversold"),
        ]
        return self.result(
            {"plot0": plot_points(bars, mfi)},
            fills=[FillData(plot1="hline_upper", plot2="hline_lower", color="#7E57C21A")],
            hlines=hlines,
        )


class ATRIndicator(Indicator):
    """Average True Range with selectable smoothing."""
    id = "atr"
    name = "Average True Range (ATR)"
    category = "Volatility"
    description = "Smoothed true range, a measure of bar-to-bar volatility."
    metadata = IndicatorMetadata(title="Average True Range", short_title="ATR", overlay=False)
    inputs_class = ATRInputs

    def calculate(self, bars: Sequence[Bar]) -> IndicatorResult:
        atr = ta.ma(self.inputs.smoothing, ta.true_range(bars), self.inputs.length)
        return self.result({"plot0": plot_points(bars, atr)})


class MACDIndicator(Indicator):
    """MACD histogram, line and signal."""
    id = "macd"
    name = "Moving Average Convergence Divergence (MACD)"
    category = "Momentum"
    description = "Difference of fast and slow EMAs with an EMA signal line."
    metadata = IndicatorMetadata(title="Moving Average Convergence Divergence", short_title="MACD", overlay=False)
    inputs_class = MACDInputs

    @staticmethod
    def histogram_colors(histogram: Sequence[float]) -> List[Optional[str]]:
        """Four-colour histogram: above/below zero, growing/shrinking."""
        colors: List[Optional[str]] = []
        prev = math.nan
        for value in histogram:
            if math.isnan(value):
                colors.append(None)
            elif value >= 0:
                colors.append(MACD_COLORS["above_rising"] if prev < value else MACD_COLORS["above_falling"])
            else:
                colors.append(MACD_COLORS["below_rising"] if prev < value else MACD_COLORS["below_falling"])
            prev = value
        return colors

    def calculate(self, bars: Sequence[Bar]) -> IndicatorResult:
        source = source_series(bars, self.inputs.source)
        line, signal, histogram = ta.macd(
            source, self.inputs.fast_length, self.inputs.slow_length, self.inputs.signal_length
        )
        hist_values = histogram.to_list()
        return self.result(
            {
                "plot0": plot_points(bars, hist_values, colors=self.histogram_colors(hist_values)),
                "plot1": plot_points(bars, line),
                "plot2": plot_points(bars, signal),
            },
            hlines=[HLine(id="hline_zero", price=0, title="Zero Line")],
        )


class BollingerBandsIndicator(Indicator):
    """Bollinger Bands."""
    id = "bb"
    name = "Bollinger Bands (BB)"
    category = "Channels & Bands"
    description = "SMA basis with bands a multiple of the standard deviation away."
    metadata = IndicatorMetadata(title="Bollinger Bands", short_title="BB", overlay=True)
    inputs_class = BBInputs

    def calculate(self, bars: Sequence[Bar]) -> IndicatorResult:
        source = source_series(bars, self.inputs.source)
        basis, upper, lower = ta.bb(source, self.inputs.length, self.inputs.mult)
        offset = self.inputs.offset
        return self.result(
            {
                "plot0": plot_points(bars, basis, offset=offset),
                "plot1": plot_points(bars, upper, offset=offset),
                "plot2": plot_points(bars, lower, offset=offset),
            },
            fills=[FillData(plot1="plot1", plot2="plot2", color="#2196F31A", title="Background")],
        )


class SupertrendIndicator(Indicator):
    """Supertrend split into up- and down-trend plots."""
    id = "supertrend"
    name = "Supertrend"
    category = "Trend"
    description = "ATR trailing stop that flips side when the close breaks through."
    metadata = IndicatorMetadata(title="Supertrend", short_title="Supertrend", overlay=True)
    inputs_class = SupertrendInputs

    def calculate(self, bars: Sequence[Bar]) -> IndicatorResult:
        line, direction = ta.supertrend(bars, self.inputs.factor, self.inputs.atr_period)
        values = line.values
        dirs = direction.values
        with np.errstate(invalid="ignore"):
            up = np.where(dirs < 0, values, np.nan)
            down = np.where(dirs > 0, values, np.nan)
        body_middle = [(b.open + b.close) / 2 for b in bars]
        fills = [
            FillData(plot1="plot2", plot2="plot0", color="#26A69A1A", title="Uptrend background"),
            FillData(plot1="plot2", plot2="plot1", color="#EF53501A", title="Downtrend background"),
        ]
        return self.result(
            {
                "plot0": plot_points(bars, up),
                "plot1": plot_points(bars, down),
                "plot2": plot_points(bars, body_middle),
            },
            fills=fills,
        )


class WilliamsRIndicator(Indicator):
    """Williams %R."""
    id = "williams-r"
    name = "Williams %R"
    category = "Oscillators"
    description = "Close relative to the highest high of the window, from 0 to -100."
    metadata = IndicatorMetadata(title="Williams Percent Range", short_title="%R", overlay=False)
    inputs_class = WilliamsRInputs

    def calculate(self, bars: Sequence[Bar]) -> IndicatorResult:
        high, low, _ = ta.hlc(bars)
        source = source_series(bars, self.inputs.source)
        wr = ta.williams_r(source, high, low, self.inputs.length)
        hlines = [
            HLine(id="hline_upper", price=-20, title="Upper Band"),
            HLine(id="hline_mid", price=-50, title="Middle Level"),
            HLine(id="hline_lower", price=-80, title="Lower Band"),
        ]
        return self.result(
            {"plot0": plot_points(bars, wr)},
            fills=[FillData(plot1="hline_upper", plot2="hline_lower", color="#7E57C21A")],
            hlines=hlines,
        )


class OBVIndicator(Indicator):
    """On Balance Volume with optional smoothing line."""
    id = "obv"
    name = "On Balance Volume (OBV)"
    category = "Volume"
    description = "Running total of volume signed by the close-to-close direction."
    metadata = IndicatorMetadata(title="On Balance Volume", short_title="OBV", overlay=False)
    inputs_class = OBVInputs

    @staticmethod
    def on_balance_volume(bars: Sequence[Bar]) -> Series:
        """Cumulative signed volume; the first bar is 0."""
        close = source_series(bars, "close")
        direction = np.sign(ta.change(close, 1).fillna(0.0).values)
        return ta.cum(volume_series(bars) * close.derive(direction))

    def calculate(self, bars: Sequence[Bar]) -> IndicatorResult:
        _warn_if_no_volume(self.id, bars)
        obv = self.on_balance_volume(bars)
        ma_plot, upper, lower, fills = _smoothing_plots(
            bars, obv, self.inputs.ma_type, self.inputs.ma_length, self.inputs.bb_mult
        )
        return self.result(
            {"plot0": plot_points(bars, obv), "plot1": ma_plot, "plot2": upper, "plot3": lower},
            fills=fills,
        )


class ROCIndicator(Indicator):
    """Rate of Change."""
    id = "roc"
    name = "Rate of Change (ROC)"
    category = "Momentum"
    description = "Percent change of the source over a number of bars."
    metadata = IndicatorMetadata(title="Rate Of Change", short_title="ROC", overlay=False)
    inputs_class = ROCInputs

    def calculate(self, bars: Sequence[Bar]) -> IndicatorResult:
        roc = ta.roc(source_series(bars, self.inputs.source), self.inputs.length)
        return self.result(
            {"plot0": plot_points(bars, roc)},
            hlines=[HLine(id="hline_zero", price=0, title="Zero Line")],
        )


# Export all indicator classes
__all__ = [
    'SMAIndicator', 'EMAIndicator', 'WMAIndicator', 'VWMAIndicator', 'MACrossIndicator',
    'RSIIndicator', 'StochasticIndicator', 'CCIIndicator', 'MFIIndicator', 'ATRIndicator',
    'MACDIndicator', 'BollingerBandsIndicator', 'SupertrendIndicator', 'WilliamsRIndicator',
    'OBVIndicator', 'ROCIndicator',
]
