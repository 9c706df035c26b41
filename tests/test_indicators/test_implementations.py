"""
Tests for the standard indicator implementations.
"""
import logging
import math
import pytest
import numpy as np
import pandas as pd

from takernel import kernel as ta
from takernel.indicators.implementations import (
    SMAIndicator, EMAIndicator, WMAIndicator, VWMAIndicator, MACrossIndicator,
    RSIIndicator, StochasticIndicator, CCIIndicator, MFIIndicator, ATRIndicator,
    MACDIndicator, BollingerBandsIndicator, SupertrendIndicator, WilliamsRIndicator,
    OBVIndicator, ROCIndicator, MACD_COLORS,
)
from takernel.kernel.series import source_series
from takernel.shared.errors import InvalidInputError, InvalidLengthError
from takernel.shared.types import Bar

ALL_INDICATORS = [
    SMAIndicator, EMAIndicator, WMAIndicator, VWMAIndicator, MACrossIndicator,
    RSIIndicator, StochasticIndicator, CCIIndicator, MFIIndicator, ATRIndicator,
    MACDIndicator, BollingerBandsIndicator, SupertrendIndicator, WilliamsRIndicator,
    OBVIndicator, ROCIndicator,
]


def _bars(closes, volume=1000.0):
    dates = pd.date_range('2020-01-01', periods=len(closes), freq='D')
    return [
        Bar(time=dates[i], open=c, high=c + 1.0, low=c - 1.0, close=c, volume=volume)
        for i, c in enumerate(closes)
    ]


@pytest.fixture
def sample_bars():
    """Random walk OHLCV bars."""
    np.random.seed(42)
    n = 150
    close = 100 + np.cumsum(np.random.randn(n))
    high = close + np.random.uniform(0.1, 2.0, n)
    low = close - np.random.uniform(0.1, 2.0, n)
    open_ = close + np.random.uniform(-0.5, 0.5, n)
    volume = np.random.randint(1000, 10000, n).astype(float)
    dates = pd.date_range('2020-01-01', periods=n, freq='D')
    return [
        Bar(time=dates[i], open=open_[i], high=high[i], low=low[i], close=close[i], volume=volume[i])
        for i in range(n)
    ]


class TestAllIndicators:
    """Shape guarantees every indicator must meet."""

    @pytest.mark.parametrize('cls', ALL_INDICATORS)
    def test_plots_aligned_with_bars(self, sample_bars, cls):
        result = cls().run(sample_bars)
        assert result.plots
        for plot_id, points in result.plots.items():
            assert len(points) == len(sample_bars), plot_id
            assert [p.time for p in points] == [b.time for b in sample_bars]

    @pytest.mark.parametrize('cls', ALL_INDICATORS)
    def test_deterministic(self, sample_bars, cls):
        first = cls().run(sample_bars).to_frame()
        second = cls().run(sample_bars).to_frame()
        pd.testing.assert_frame_equal(first, second)

    @pytest.mark.parametrize('cls', ALL_INDICATORS)
    def test_short_history_does_not_raise(self, cls):
        result = cls().run(_bars([10.0, 11.0]))
        assert all(len(points) == 2 for points in result.plots.values())

    @pytest.mark.parametrize('cls', ALL_INDICATORS)
    def test_fills_reference_known_ids(self, sample_bars, cls):
        result = cls().run(sample_bars)
        known = set(result.plots) | {h.id for h in result.hlines}
        for fill in result.fills:
            assert fill.plot1 in known and fill.plot2 in known


class TestMovingAverages:
    """SMA / EMA / WMA / VWMA overlays and MA Cross."""

    def test_sma_matches_kernel(self, sample_bars):
        result = SMAIndicator(length=9).run(sample_bars)
        expected = ta.sma(source_series(sample_bars), 9).to_list()
        np.testing.assert_array_equal(result.values('plot0'), expected)

    def test_offset(self, sample_bars):
        plain = SMAIndicator(length=5).run(sample_bars).values('plot0')
        shifted = EMAIndicator(length=5, offset=3).run(sample_bars).values('plot0')
        ema = ta.ema(source_series(sample_bars), 5).to_list()
        assert all(math.isnan(v) for v in shifted[:3])
        assert shifted[3:] == ema[:-3]
        assert len(plain) == len(shifted)

    def test_source_input(self, sample_bars):
        result = WMAIndicator(length=4, source='hl2').run(sample_bars)
        expected = ta.wma(source_series(sample_bars, 'hl2'), 4).to_list()
        np.testing.assert_array_equal(result.values('plot0'), expected)

    def test_vwma_warns_without_volume(self, caplog):
        bars = [Bar(time=i, open=1.0, high=2.0, low=0.5, close=1.5) for i in range(5)]
        with caplog.at_level(logging.WARNING):
            result = VWMAIndicator(length=2).run(bars)
        assert 'no volume' in caplog.text
        assert all(math.isnan(v) for v in result.values('plot0'))

    def test_ma_cross_markers(self):
        closes = [10.0] * 5 + [20.0] * 5
        result = MACrossIndicator(short_length=2, long_length=4).run(_bars(closes))
        markers = result.values('plot2')
        crossings = [i for i, v in enumerate(markers) if not math.isnan(v)]
        assert crossings == [5]
        assert markers[5] == result.values('plot0')[5]

    def test_ma_cross_rejects_inverted_lengths(self):
        with pytest.raises(InvalidInputError):
            MACrossIndicator(short_length=21, long_length=9)


class TestRSI:
    """RSI with its smoothing options."""

    def test_short_rising(self):
        result = RSIIndicator(length=2, ma_type='None').run(_bars([10.0, 11.0, 12.0]))
        values = result.values('plot0')
        assert math.isnan(values[0])
        assert values[1:] == [100.0, 100.0]
        assert all(math.isnan(v) for v in result.values('plot1'))

    def test_hlines(self, sample_bars):
        result = RSIIndicator(oversold=25, overbought=75).run(sample_bars)
        prices = {h.id: h.price for h in result.hlines}
        assert prices == {'hline_upper': 75, 'hline_mid': 50, 'hline_lower': 25}

    def test_sma_smoothing(self, sample_bars):
        result = RSIIndicator(length=14, ma_type='SMA', ma_length=5).run(sample_bars)
        rsi = ta.rsi(source_series(sample_bars), 14)
        np.testing.assert_array_equal(result.values('plot1'), ta.sma(rsi, 5).to_list())

    def test_bollinger_smoothing(self, sample_bars):
        result = RSIIndicator(ma_type='SMA + Bollinger Bands', ma_length=10, bb_mult=2.0).run(sample_bars)
        middle = result.values('plot1')
        upper = result.values('plot2')
        lower = result.values('plot3')
        for m, u, lo in zip(middle, upper, lower):
            if not math.isnan(m):
                assert lo <= m <= u
        assert any(f.title == 'BB Background' for f in result.fills)

    def test_invalid_bands(self):
        with pytest.raises(InvalidInputError):
            RSIIndicator(oversold=80, overbought=20)

    def test_invalid_length(self):
        with pytest.raises(InvalidLengthError):
            RSIIndicator(length=0)

    def test_unknown_smoothing(self):
        with pytest.raises(InvalidInputError):
            RSIIndicator(ma_type='KAMA')


class TestOscillators:
    """Stochastic, CCI, MFI, ATR, Williams %R, ROC."""

    def test_stochastic_range(self, sample_bars):
        result = StochasticIndicator().run(sample_bars)
        for plot_id in ('plot0', 'plot1'):
            defined = [v for v in result.values(plot_id) if not math.isnan(v)]
            assert defined
            assert all(0.0 <= v <= 100.0 for v in defined)

    def test_stochastic_d_is_sma_of_k(self, sample_bars):
        result = StochasticIndicator(period_k=14, smooth_k=1, period_d=3).run(sample_bars)
        k = source_series(sample_bars).derive(result.values('plot0'))
        np.testing.assert_array_equal(result.values('plot1'), ta.sma(k, 3).to_list())

    def test_cci_uses_hlc3(self, sample_bars):
        result = CCIIndicator(length=20).run(sample_bars)
        expected = ta.cci(source_series(sample_bars, 'hlc3'), 20).to_list()
        np.testing.assert_array_equal(result.values('plot0'), expected)

    def test_mfi_bounded(self, sample_bars):
        defined = [v for v in MFIIndicator().run(sample_bars).values('plot0') if not math.isnan(v)]
        assert all(0.0 <= v <= 100.0 for v in defined)

    def test_atr_default_is_rma(self, sample_bars):
        result = ATRIndicator(length=14).run(sample_bars)
        np.testing.assert_array_equal(result.values('plot0'), ta.atr(sample_bars, 14).to_list())

    def test_atr_smoothing(self, sample_bars):
        result = ATRIndicator(length=14, smoothing='EMA').run(sample_bars)
        expected = ta.ema(ta.true_range(sample_bars), 14).to_list()
        np.testing.assert_array_equal(result.values('plot0'), expected)

    def test_atr_rejects_vwma(self):
        with pytest.raises(InvalidInputError):
            ATRIndicator(smoothing='VWMA')

    def test_williams_r_range(self, sample_bars):
        defined = [v for v in WilliamsRIndicator().run(sample_bars).values('plot0') if not math.isnan(v)]
        assert all(-100.0 <= v <= 0.0 for v in defined)

    def test_roc(self):
        result = ROCIndicator(length=1).run(_bars([10.0, 11.0, 11.0]))
        values = result.values('plot0')
        assert math.isnan(values[0])
        assert values[1] == pytest.approx(10.0)
        assert values[2] == 0.0


class TestMACD:
    """MACD plots and histogram colours."""

    def test_plots(self, sample_bars):
        result = MACDIndicator().run(sample_bars)
        line, signal, hist = ta.macd(source_series(sample_bars), 12, 26, 9)
        np.testing.assert_array_equal(result.values('plot0'), hist.to_list())
        np.testing.assert_array_equal(result.values('plot1'), line.to_list())
        np.testing.assert_array_equal(result.values('plot2'), signal.to_list())

    def test_histogram_colors(self):
        colors = MACDIndicator.histogram_colors([math.nan, 1.0, 2.0, 1.5, -1.0, -2.0, -1.5])
        assert colors == [
            None,
            MACD_COLORS['above_falling'],
            MACD_COLORS['above_rising'],
            MACD_COLORS['above_falling'],
            MACD_COLORS['below_falling'],
            MACD_COLORS['below_falling'],
            MACD_COLORS['below_rising'],
        ]

    def test_fast_must_be_below_slow(self):
        with pytest.raises(InvalidInputError):
            MACDIndicator(fast_length=26, slow_length=12)


class TestBands:
    """Bollinger Bands and Supertrend."""

    def test_bollinger(self, sample_bars):
        result = BollingerBandsIndicator(length=20, mult=2.0).run(sample_bars)
        basis, upper, lower = ta.bb(source_series(sample_bars), 20, 2.0)
        np.testing.assert_array_equal(result.values('plot0'), basis.to_list())
        np.testing.assert_array_equal(result.values('plot1'), upper.to_list())
        np.testing.assert_array_equal(result.values('plot2'), lower.to_list())

    def test_bollinger_rejects_mult(self):
        with pytest.raises(InvalidInputError):
            BollingerBandsIndicator(mult=0)

    def test_supertrend_splits_by_direction(self, sample_bars):
        result = SupertrendIndicator().run(sample_bars)
        up = result.values('plot0')
        down = result.values('plot1')
        for u, d in zip(up, down):
            assert math.isnan(u) or math.isnan(d)
        _, direction = ta.supertrend(sample_bars, 3.0, 10)
        for i, value in enumerate(direction):
            if not math.isnan(value):
                assert math.isnan(up[i]) != math.isnan(down[i])


class TestOBV:
    """On Balance Volume."""

    def test_cumulative(self):
        bars = _bars([10.0, 11.0, 10.5, 10.5, 12.0], volume=100.0)
        values = OBVIndicator().run(bars).values('plot0')
        assert values == [0.0, 100.0, 0.0, 0.0, 100.0]

    def test_smoothing_line(self, sample_bars):
        result = OBVIndicator(ma_type='EMA', ma_length=10).run(sample_bars)
        obv = OBVIndicator.on_balance_volume(sample_bars)
        np.testing.assert_array_equal(result.values('plot1'), ta.ema(obv, 10).to_list())
