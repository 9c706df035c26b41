"""
Tests for the Series abstraction and source projection.
"""
import math
import pytest
import numpy as np
import pandas as pd

from takernel.kernel.series import Series, source_series, hlc, volume_series
from takernel.shared.errors import EmptySeriesError, InvalidInputError, SeriesAlignmentError
from takernel.shared.types import Bar, SourceType


@pytest.fixture
def bars():
    """Five bars with simple round numbers."""
    dates = pd.date_range('2020-01-01', periods=5, freq='D')
    return [
        Bar(time=dates[i], open=10.0 + i, high=12.0 + i, low=8.0 + i, close=11.0 + i, volume=100.0 * (i + 1))
        for i in range(5)
    ]


class TestConstruction:
    """Test the three ways of building a Series."""

    def test_from_bars_alignment(self, bars):
        """One value per bar, times taken from the bars."""
        close = Series.from_bars(bars, lambda b: b.close)
        assert len(close) == len(bars)
        assert list(close.times) == [b.time for b in bars]
        assert close.to_list() == [11.0, 12.0, 13.0, 14.0, 15.0]

    def test_from_values_converts_none_to_nan(self, bars):
        """None becomes the NaN sentinel."""
        s = Series.from_values([1.0, None, 3.0, None, 5.0], bars)
        assert math.isnan(s[1])
        assert math.isnan(s[3])
        assert s[4] == 5.0

    def test_from_values_length_mismatch(self, bars):
        """Values and timestamps must line up."""
        with pytest.raises(SeriesAlignmentError):
            Series.from_values([1.0, 2.0], bars)

    def test_empty_bars_rejected(self):
        """An empty bar sequence is a configuration error."""
        with pytest.raises(EmptySeriesError):
            Series.from_bars([], lambda b: b.close)

    def test_empty_errors_are_value_errors(self):
        """Configuration errors subclass ValueError."""
        with pytest.raises(ValueError):
            Series.from_values([], [])

    def test_from_pandas(self):
        """Index of the pandas Series becomes the time axis."""
        data = pd.Series([1.0, 2.0, np.nan], index=pd.date_range('2021-01-01', periods=3))
        s = Series.from_pandas(data)
        assert len(s) == 3
        assert math.isnan(s[2])
        assert s.times[0] == pd.Timestamp('2021-01-01')

    def test_map_keeps_undefined(self, bars):
        """map() only touches defined values."""
        s = Series.from_values([1.0, None, 3.0, 4.0, 5.0], bars)
        doubled = s.map(lambda v: v * 2)
        assert doubled[0] == 2.0
        assert math.isnan(doubled[1])

    def test_values_are_read_only(self, bars):
        """Series are immutable."""
        s = Series.from_bars(bars, lambda b: b.close)
        with pytest.raises(ValueError):
            s.values[0] = 99.0

    def test_to_numpy_is_a_copy(self, bars):
        s = Series.from_bars(bars, lambda b: b.close)
        arr = s.to_numpy()
        arr[0] = 99.0
        assert s[0] == 11.0


class TestArithmetic:
    """Elementwise arithmetic with NaN propagation."""

    def test_nan_propagates(self, bars):
        """Undefined in either operand gives undefined."""
        a = Series.from_values([1.0, None, 3.0, 4.0, 5.0], bars)
        b = Series.from_values([1.0, 2.0, None, 4.0, 5.0], bars)
        total = (a + b).to_list()
        assert total[0] == 2.0
        assert math.isnan(total[1])
        assert math.isnan(total[2])
        assert total[3] == 8.0

    def test_scalar_operands(self, bars):
        s = Series.from_bars(bars, lambda b: b.close)
        assert (s * 2)[0] == 22.0
        assert (2 * s)[0] == 22.0
        assert (s - 1)[0] == 10.0
        assert (1 - s)[0] == -10.0
        assert (s / 2)[0] == 5.5
        assert (22 / s)[0] == 2.0
        assert (-s)[0] == -11.0

    def test_division_by_zero_is_undefined(self, bars):
        """Zero denominators yield NaN, never inf."""
        a = Series.from_values([1.0, 0.0, 3.0, 4.0, 5.0], bars)
        b = Series.from_values([0.0, 0.0, 1.0, 2.0, 0.0], bars)
        ratio = (a / b).to_list()
        assert math.isnan(ratio[0])
        assert math.isnan(ratio[1])
        assert ratio[2] == 3.0
        assert math.isnan(ratio[4])

    def test_comparisons(self, bars):
        """Comparisons return 1.0/0.0 and NaN where undefined."""
        a = Series.from_values([1.0, 2.0, None, 4.0, 5.0], bars)
        b = Series.from_values([1.0, 1.0, 1.0, 5.0, 5.0], bars)
        gt = (a > b).to_list()
        assert gt[0] == 0.0
        assert gt[1] == 1.0
        assert math.isnan(gt[2])
        assert (a >= b).to_list()[0] == 1.0
        assert (a == b).to_list()[4] == 1.0
        assert (a != b).to_list()[3] == 1.0
        assert (a < 3).to_list()[:2] == [1.0, 1.0]

    def test_length_mismatch_rejected(self, bars):
        """Combining Series of different lengths is a configuration error."""
        a = Series.from_bars(bars, lambda b: b.close)
        b = Series.from_bars(bars[:3], lambda b: b.close)
        with pytest.raises(SeriesAlignmentError):
            a + b

    def test_shift(self, bars):
        s = Series.from_bars(bars, lambda b: b.close)
        shifted = s.shift(2).to_list()
        assert math.isnan(shifted[0]) and math.isnan(shifted[1])
        assert shifted[2] == 11.0
        assert s.shift(0).equals(s)
        assert all(math.isnan(v) for v in s.shift(10).to_list())

    def test_fillna_and_abs(self, bars):
        s = Series.from_values([-1.0, None, 3.0, None, -5.0], bars)
        assert s.fillna(0.0).to_list() == [-1.0, 0.0, 3.0, 0.0, -5.0]
        assert abs(s).to_list()[4] == 5.0

    def test_is_defined_mask(self, bars):
        s = Series.from_values([1.0, None, 3.0, np.nan, 5.0], bars)
        assert s.is_defined().tolist() == [True, False, True, False, True]

    def test_equals_treats_nan_positions(self, bars):
        a = Series.from_values([1.0, None, 3.0, 4.0, 5.0], bars)
        b = Series.from_values([1.0, None, 3.0, 4.0, 5.0], bars)
        assert a.equals(b)
        assert not a.equals(b + 1)

    def test_to_pandas_keeps_index(self, bars):
        s = Series.from_bars(bars, lambda b: b.close)
        data = s.to_pandas()
        assert isinstance(data, pd.Series)
        assert data.index[0] == bars[0].time


class TestSourceSeries:
    """Price source projections."""

    def test_composite_sources(self, bars):
        b = bars[0]
        assert source_series(bars, SourceType.HL2)[0] == (b.high + b.low) / 2
        assert source_series(bars, 'hlc3')[0] == pytest.approx((b.high + b.low + b.close) / 3)
        assert source_series(bars, 'ohlc4')[0] == (b.open + b.high + b.low + b.close) / 4
        assert source_series(bars, 'hlcc4')[0] == (b.high + b.low + 2 * b.close) / 4

    def test_missing_volume_is_zero(self):
        bars = [Bar(time=i, open=1.0, high=2.0, low=0.5, close=1.5) for i in range(3)]
        assert volume_series(bars).to_list() == [0.0, 0.0, 0.0]

    def test_unknown_source(self, bars):
        with pytest.raises(InvalidInputError):
            source_series(bars, 'typical')

    def test_hlc(self, bars):
        high, low, close = hlc(bars)
        assert high[0] == 12.0
        assert low[0] == 8.0
        assert close[0] == 11.0
