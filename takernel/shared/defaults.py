"""
Centralized default values for kernel and indicator parameters.

This is the SINGLE SOURCE OF TRUTH for all indicator parameter defaults.
Indicator input dataclasses and the YAML preset loader import from here.

Values follow the conventional charting defaults (Wilder for RSI/ATR,
Appel for MACD, Bollinger for BB, Lane for the stochastic).
"""

# Moving averages
SMA_LENGTH = 9
EMA_LENGTH = 9
WMA_LENGTH = 9
VWMA_LENGTH = 20
MA_CROSS_SHORT = 9
MA_CROSS_LONG = 21

# RSI (Relative Strength Index)
RSI_PERIOD = 14
RSI_OVERSOLD = 30
RSI_OVERBOUGHT = 70

# MACD (Moving Average Convergence Divergence)
MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL = 9

# Stochastic
STOCH_K_PERIOD = 14
STOCH_K_SMOOTH = 1
STOCH_D_PERIOD = 3
STOCH_OVERSOLD = 20
STOCH_OVERBOUGHT = 80

# CCI (Commodity Channel Index)
CCI_PERIOD = 20
CCI_CONSTANT = 0.015  # Lambert's scaling constant

# MFI (Money Flow Index)
MFI_PERIOD = 14

# Volatility
ATR_PERIOD = 14
BB_PERIOD = 20
BB_MULT = 2.0
KC_PERIOD = 20
KC_MULT = 1.5
DONCHIAN_PERIOD = 20

# Supertrend
SUPERTREND_ATR_PERIOD = 10
SUPERTREND_FACTOR = 3.0

# Momentum
WILLIAMS_R_PERIOD = 14
ROC_PERIOD = 9
CMO_PERIOD = 9
TSI_SHORT = 13
TSI_LONG = 25

# Adaptive / composite moving averages
ALMA_OFFSET = 0.85
ALMA_SIGMA = 6.0
VIDYA_CMO_PERIOD = 9
