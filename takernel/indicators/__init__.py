"""
Indicator modules built on the kernel.

Provides:
- The Indicator interface and plot mapping helpers
- Standard indicators (moving averages, RSI, stochastic, CCI, MFI, ATR,
  MACD, Bollinger Bands, Supertrend, Williams %R, OBV, ROC, MA Cross)
- Input dataclasses with validation and YAML presets
- A registry to look indicators up and run them by id
"""
from .base import Indicator, plot_points
from .implementations import (
    SMAIndicator,
    EMAIndicator,
    WMAIndicator,
    VWMAIndicator,
    MACrossIndicator,
    RSIIndicator,
    StochasticIndicator,
    CCIIndicator,
    MFIIndicator,
    ATRIndicator,
    MACDIndicator,
    BollingerBandsIndicator,
    SupertrendIndicator,
    WilliamsRIndicator,
    OBVIndicator,
    ROCIndicator,
)
from .config import resolve_inputs
from .registry import (
    INDICATOR_REGISTRY,
    RegistryEntry,
    list_indicators,
    get_entry,
    create_indicator,
    calculate,
    calculate_many,
)
from .config_loader import load_presets_from_yaml, parse_presets

__all__ = [
    'Indicator',
    'plot_points',
    'SMAIndicator',
    'EMAIndicator',
    'WMAIndicator',
    'VWMAIndicator',
    'MACrossIndicator',
    'RSIIndicator',
    'StochasticIndicator',
    'CCIIndicator',
    'MFIIndicator',
    'ATRIndicator',
    'MACDIndicator',
    'BollingerBandsIndicator',
    'SupertrendIndicator',
    'WilliamsRIndicator',
    'OBVIndicator',
    'ROCIndicator',
    'resolve_inputs',
    'INDICATOR_REGISTRY',
    'RegistryEntry',
    'list_indicators',
    'get_entry',
    'create_indicator',
    'calculate',
    'calculate_many',
    'load_presets_from_yaml',
    'parse_presets',
]
