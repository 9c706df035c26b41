"""
Indicator input configuration.

One dataclass per indicator, defaults drawn from shared.defaults.
Validation runs at construction time (fail fast with clear errors), so an
indicator instance never holds an invalid configuration.
"""
from dataclasses import dataclass, fields, is_dataclass, asdict
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from ..kernel.moving_average import resolve_ma_type
from ..shared.defaults import (
    SMA_LENGTH, EMA_LENGTH, WMA_LENGTH, VWMA_LENGTH,
    MA_CROSS_SHORT, MA_CROSS_LONG,
    RSI_PERIOD, RSI_OVERSOLD, RSI_OVERBOUGHT,
    MACD_FAST, MACD_SLOW, MACD_SIGNAL,
    STOCH_K_PERIOD, STOCH_K_SMOOTH, STOCH_D_PERIOD, STOCH_OVERSOLD, STOCH_OVERBOUGHT,
    CCI_PERIOD, MFI_PERIOD, ATR_PERIOD,
    BB_PERIOD, BB_MULT,
    SUPERTREND_ATR_PERIOD, SUPERTREND_FACTOR,
    WILLIAMS_R_PERIOD, ROC_PERIOD,
)
from ..shared.errors import InvalidInputError, validate_length
from ..shared.types import SourceType

# Smoothing options for indicators that draw an optional MA over their line
MA_NONE = "None"
MA_SMA_BB = "SMA + Bollinger Bands"

InputsT = TypeVar("InputsT")


def _validate_source(source: str) -> None:
    try:
        SourceType(source)
    except ValueError:
        valid = [s.value for s in SourceType]
        raise InvalidInputError(f"source must be one of {valid}, got {source!r}") from None


def _validate_smoothing(ma_type: str, allow_none: bool = True) -> None:
    if allow_none and ma_type in (MA_NONE, MA_SMA_BB):
        return
    resolve_ma_type(ma_type)


def _validate_positive(value: float, name: str) -> None:
    if value <= 0:
        raise InvalidInputError(f"{name} must be > 0, got {value}")


def _validate_offset(offset: int) -> None:
    if isinstance(offset, bool) or not isinstance(offset, int):
        raise InvalidInputError(f"offset must be an integer, got {offset!r}")


@dataclass
class MovingAverageInputs:
    """Shared inputs for the single-line moving average overlays."""
    length: int = SMA_LENGTH
    source: str = SourceType.CLOSE.value
    offset: int = 0

    def __post_init__(self):
        self.length = validate_length(self.length)
        _validate_source(self.source)
        _validate_offset(self.offset)


@dataclass
class SMAInputs(MovingAverageInputs):
    length: int = SMA_LENGTH


@dataclass
class EMAInputs(MovingAverageInputs):
    length: int = EMA_LENGTH


@dataclass
class WMAInputs(MovingAverageInputs):
    length: int = WMA_LENGTH


@dataclass
class VWMAInputs(MovingAverageInputs):
    length: int = VWMA_LENGTH


@dataclass
class MACrossInputs:
    short_length: int = MA_CROSS_SHORT
    long_length: int = MA_CROSS_LONG

    def __post_init__(self):
        self.short_length = validate_length(self.short_length, "short_length")
        self.long_length = validate_length(self.long_length, "long_length")
        if self.short_length >= self.long_length:
            raise InvalidInputError(
                f"short_length ({self.short_length}) must be less than long_length ({self.long_length})"
            )


@dataclass
class RSIInputs:
    length: int = RSI_PERIOD
    source: str = SourceType.CLOSE.value
    ma_type: str = "SMA"  # "None", any MAType value, or "SMA + Bollinger Bands"
    ma_length: int = RSI_PERIOD
    bb_mult: float = BB_MULT
    oversold: float = RSI_OVERSOLD
    overbought: float = RSI_OVERBOUGHT

    def __post_init__(self):
        self.length = validate_length(self.length)
        self.ma_length = validate_length(self.ma_length, "ma_length")
        _validate_source(self.source)
        _validate_smoothing(self.ma_type)
        _validate_positive(self.bb_mult, "bb_mult")
        if not (0 <= self.oversold < self.overbought <= 100):
            raise InvalidInputError(
                f"RSI bands must satisfy 0 <= oversold < overbought <= 100, "
                f"got {self.oversold} / {self.overbought}"
            )


@dataclass
class StochasticInputs:
    period_k: int = STOCH_K_PERIOD
    smooth_k: int = STOCH_K_SMOOTH
    period_d: int = STOCH_D_PERIOD
    oversold: float = STOCH_OVERSOLD
    overbought: float = STOCH_OVERBOUGHT

    def __post_init__(self):
        self.period_k = validate_length(self.period_k, "period_k")
        self.smooth_k = validate_length(self.smooth_k, "smooth_k")
        self.period_d = validate_length(self.period_d, "period_d")
        if not (0 <= self.oversold < self.overbought <= 100):
            raise InvalidInputError(
                f"stochastic bands must satisfy 0 <= oversold < overbought <= 100, "
                f"got {self.oversold} / {self.overbought}"
            )


@dataclass
class CCIInputs:
    length: int = CCI_PERIOD
    source: str = SourceType.HLC3.value

    def __post_init__(self):
        self.length = validate_length(self.length)
        _validate_source(self.source)


@dataclass
class MFIInputs:
    length: int = MFI_PERIOD

    def __post_init__(self):
        self.length = validate_length(self.length)


@dataclass
class ATRInputs:
    length: int = ATR_PERIOD
    smoothing: str = "SMMA (RMA)"

    def __post_init__(self):
        self.length = validate_length(self.length)
        _validate_smoothing(self.smoothing, allow_none=False)
        if resolve_ma_type(self.smoothing).value == "VWMA":
            raise InvalidInputError("ATR smoothing cannot be VWMA")


@dataclass
class MACDInputs:
    fast_length: int = MACD_FAST
    slow_length: int = MACD_SLOW
    signal_length: int = MACD_SIGNAL
    source: str = SourceType.CLOSE.value

    def __post_init__(self):
        self.fast_length = validate_length(self.fast_length, "fast_length")
        self.slow_length = validate_length(self.slow_length, "slow_length")
        self.signal_length = validate_length(self.signal_length, "signal_length")
        _validate_source(self.source)
        if self.fast_length >= self.slow_length:
            raise InvalidInputError(
                f"MACD fast_length ({self.fast_length}) must be less than slow_length ({self.slow_length})"
            )


@dataclass
class BBInputs:
    length: int = BB_PERIOD
    mult: float = BB_MULT
    source: str = SourceType.CLOSE.value
    offset: int = 0

    def __post_init__(self):
        self.length = validate_length(self.length)
        _validate_positive(self.mult, "mult")
        _validate_source(self.source)
        _validate_offset(self.offset)


@dataclass
class SupertrendInputs:
    atr_period: int = SUPERTREND_ATR_PERIOD
    factor: float = SUPERTREND_FACTOR

    def __post_init__(self):
        self.atr_period = validate_length(self.atr_period, "atr_period")
        _validate_positive(self.factor, "factor")


@dataclass
class WilliamsRInputs:
    length: int = WILLIAMS_R_PERIOD
    source: str = SourceType.CLOSE.value

    def __post_init__(self):
        self.length = validate_length(self.length)
        _validate_source(self.source)


@dataclass
class OBVInputs:
    ma_type: str = MA_NONE
    ma_length: int = 14
    bb_mult: float = BB_MULT

    def __post_init__(self):
        self.ma_length = validate_length(self.ma_length, "ma_length")
        _validate_smoothing(self.ma_type)
        _validate_positive(self.bb_mult, "bb_mult")


@dataclass
class ROCInputs:
    length: int = ROC_PERIOD
    source: str = SourceType.CLOSE.value

    def __post_init__(self):
        self.length = validate_length(self.length)
        _validate_source(self.source)


def resolve_inputs(
    inputs_class: Type[InputsT],
    overrides: Optional[Mapping[str, Any]] = None,
) -> InputsT:
    """
    Merge overrides onto an inputs dataclass' defaults.

    Args:
        inputs_class: One of the *Inputs dataclasses
        overrides: Partial mapping of input name -> value

    Returns:
        Validated inputs instance

    Raises:
        InvalidInputError: If an override names an unknown input
        InvalidLengthError: If a length input is not an integer >= 1
    """
    if not is_dataclass(inputs_class):
        raise TypeError(f"{inputs_class!r} is not an inputs dataclass")
    overrides = dict(overrides or {})
    known = {f.name for f in fields(inputs_class)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise InvalidInputError(
            f"Unknown inputs for {inputs_class.__name__}: {unknown}. Available: {sorted(known)}"
        )
    return inputs_class(**overrides)


def inputs_to_dict(inputs: Any) -> Dict[str, Any]:
    return asdict(inputs)
