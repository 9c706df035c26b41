"""
Tests for the indicator registry.
"""
import pytest
import numpy as np
import pandas as pd

from takernel.indicators.config import RSIInputs
from takernel.indicators.implementations import RSIIndicator
from takernel.indicators.registry import (
    INDICATOR_REGISTRY,
    calculate,
    calculate_many,
    create_indicator,
    get_entry,
    list_indicators,
)
from takernel.shared.errors import UnknownIndicatorError
from takernel.shared.types import Bar


@pytest.fixture
def sample_bars():
    np.random.seed(0)
    close = 50 + np.cumsum(np.random.randn(60))
    dates = pd.date_range('2021-01-01', periods=60, freq='D')
    return [
        Bar(time=dates[i], open=close[i], high=close[i] + 0.5, low=close[i] - 0.5, close=close[i], volume=10.0)
        for i in range(60)
    ]


class TestCatalogue:
    """Listing and lookup."""

    def test_all_standard_ids_registered(self):
        expected = {
            'sma', 'ema', 'wma', 'vwma', 'ma-cross', 'rsi', 'stoch', 'cci', 'mfi', 'atr',
            'macd', 'bb', 'supertrend', 'williams-r', 'obv', 'roc',
        }
        assert set(list_indicators()) == expected

    def test_list_sorted(self):
        ids = list_indicators()
        assert ids == sorted(ids)

    def test_filter_by_category(self):
        assert list_indicators('Moving Averages') == ['ema', 'ma-cross', 'sma', 'vwma', 'wma']
        assert list_indicators('Nope') == []

    def test_entry(self):
        entry = get_entry('rsi')
        assert entry.indicator_class is RSIIndicator
        assert entry.short_name == 'RSI'
        assert entry.overlay is False
        assert INDICATOR_REGISTRY['bb'].overlay is True

    def test_unknown_id(self):
        with pytest.raises(UnknownIndicatorError):
            get_entry('ichimoku')

    def test_unknown_id_is_key_error(self):
        with pytest.raises(KeyError):
            create_indicator('ichimoku')


class TestCalculation:
    """Running indicators by id."""

    def test_create_with_overrides(self):
        indicator = create_indicator('rsi', length=21)
        assert isinstance(indicator, RSIIndicator)
        assert indicator.inputs.length == 21

    def test_calculate(self, sample_bars):
        result = calculate('sma', sample_bars, length=5)
        expected = create_indicator('sma', length=5).run(sample_bars)
        assert result.to_frame().equals(expected.to_frame())

    def test_calculate_many(self, sample_bars):
        results = calculate_many(sample_bars, ['rsi', 'macd', 'bb'])
        assert list(results) == ['rsi', 'macd', 'bb']
        for result in results.values():
            assert all(len(points) == len(sample_bars) for points in result.plots.values())

    def test_calculate_many_inputs(self, sample_bars):
        results = calculate_many(
            sample_bars,
            ['rsi', 'sma'],
            inputs={'rsi': RSIInputs(length=7), 'sma': {'length': 3}},
        )
        assert results['rsi'].to_frame().equals(calculate('rsi', sample_bars, length=7).to_frame())
        assert results['sma'].to_frame().equals(calculate('sma', sample_bars, length=3).to_frame())

    def test_calculate_many_timings(self, sample_bars):
        timings = {'indicator_rsi': 1.0}
        calculate_many(sample_bars, ['rsi', 'atr'], timings=timings)
        assert set(timings) == {'indicator_rsi', 'indicator_atr'}
        assert timings['indicator_rsi'] > 1.0
        assert timings['indicator_atr'] >= 0.0

    def test_calculate_many_unknown(self, sample_bars):
        with pytest.raises(UnknownIndicatorError):
            calculate_many(sample_bars, ['rsi', 'nope'])
