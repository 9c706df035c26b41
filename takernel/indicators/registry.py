"""
Indicator registry.

Maps indicator ids ('rsi', 'macd', ...) to their classes and runs one or many
indicators over a bar sequence.
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Type

from ..shared.errors import UnknownIndicatorError
from ..shared.types import Bar, IndicatorResult
from .base import Indicator
from .implementations import (
    SMAIndicator, EMAIndicator, WMAIndicator, VWMAIndicator, MACrossIndicator,
    RSIIndicator, StochasticIndicator, CCIIndicator, MFIIndicator, ATRIndicator,
    MACDIndicator, BollingerBandsIndicator, SupertrendIndicator, WilliamsRIndicator,
    OBVIndicator, ROCIndicator,
)

logger = logging.getLogger(__name__)


@dataclass
class RegistryEntry:
    """Catalogue information for one indicator."""
    id: str
    name: str
    short_name: str
    category: str
    description: str
    overlay: bool
    indicator_class: Type[Indicator]


INDICATOR_CLASSES: List[Type[Indicator]] = [
    SMAIndicator, EMAIndicator, WMAIndicator, VWMAIndicator, MACrossIndicator,
    RSIIndicator, StochasticIndicator, CCIIndicator, MFIIndicator, ATRIndicator,
    MACDIndicator, BollingerBandsIndicator, SupertrendIndicator, WilliamsRIndicator,
    OBVIndicator, ROCIndicator,
]

INDICATOR_REGISTRY: Dict[str, RegistryEntry] = {
    cls.id: RegistryEntry(
        id=cls.id,
        name=cls.name,
        short_name=cls.metadata.short_title,
        category=cls.category,
        description=cls.description,
        overlay=cls.metadata.overlay,
        indicator_class=cls,
    )
    for cls in INDICATOR_CLASSES
}


def list_indicators(category: Optional[str] = None) -> List[str]:
    """Sorted indicator ids, optionally restricted to one category."""
    return sorted(
        entry.id for entry in INDICATOR_REGISTRY.values()
        if category is None or entry.category == category
    )


def get_entry(indicator_id: str) -> RegistryEntry:
    try:
        return INDICATOR_REGISTRY[indicator_id]
    except KeyError:
        raise UnknownIndicatorError(
            f"Unknown indicator '{indicator_id}'. Available: {list_indicators()}"
        ) from None


def create_indicator(indicator_id: str, inputs: Any = None, **overrides) -> Indicator:
    """Instantiate an indicator by id with validated inputs."""
    return get_entry(indicator_id).indicator_class(inputs, **overrides)


def calculate(indicator_id: str, bars: Sequence[Bar], **overrides) -> IndicatorResult:
    """
    Run one indicator.

    Args:
        indicator_id: Registry id, e.g. 'rsi'
        bars: Bars ordered by time
        **overrides: Input overrides, e.g. length=21
    """
    return create_indicator(indicator_id, **overrides).run(bars)


def calculate_many(
    bars: Sequence[Bar],
    indicators: Iterable[str],
    inputs: Optional[Mapping[str, Any]] = None,
    timings: Optional[Dict[str, float]] = None,
) -> Dict[str, IndicatorResult]:
    """
    Run several indicators over the same bars, sequentially.

    Args:
        bars: Bars ordered by time
        indicators: Registry ids
        inputs: Optional per-id inputs (dict of overrides or inputs dataclass)
        timings: If provided, accumulate per-indicator elapsed seconds
                 (keys: indicator_<id>)

    Returns:
        Dict of id -> IndicatorResult
    """
    def _acc(key: str, elapsed: float) -> None:
        if timings is not None:
            timings[key] = timings.get(key, 0.0) + elapsed

    bars = list(bars)
    inputs = inputs or {}
    results = {}
    for indicator_id in indicators:
        t0 = time.perf_counter()
        indicator = create_indicator(indicator_id, inputs.get(indicator_id))
        results[indicator_id] = indicator.run(bars)
        _acc(f"indicator_{indicator_id}", time.perf_counter() - t0)
    logger.debug("Calculated %d indicators over %d bars", len(results), len(bars))
    return results
