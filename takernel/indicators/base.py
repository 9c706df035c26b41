"""
Base indicator interface.

All indicators follow this pattern:
1. Resolve and validate inputs at construction
2. Compose kernel primitives over the bars
3. Map the numeric results into time-aligned plot records
"""
import logging
import math
import time
from abc import ABC, abstractmethod
from typing import Any, ClassVar, List, Optional, Sequence, Type

from ..kernel.series import Series
from ..shared.errors import EmptySeriesError, InvalidInputError
from ..shared.types import Bar, IndicatorMetadata, IndicatorResult, PlotPoint
from .config import resolve_inputs

logger = logging.getLogger(__name__)


def plot_points(
    bars: Sequence[Bar],
    values: Any,
    colors: Optional[Sequence[Optional[str]]] = None,
    offset: int = 0,
) -> List[PlotPoint]:
    """
    Map one value per bar to PlotPoints.

    Args:
        bars: The bars the values were computed on
        values: Series or sequence of floats (None/NaN for undefined)
        colors: Optional per-point colours
        offset: Shift the plot right (positive) or left (negative) by bars;
                positions with no source value become NaN
    """
    vals = values.to_list() if isinstance(values, Series) else list(values)
    n = len(bars)
    points = []
    for i, bar in enumerate(bars):
        src = i - offset
        value = vals[src] if 0 <= src < n else math.nan
        value = math.nan if value is None else float(value)
        color = colors[i] if colors is not None else None
        points.append(PlotPoint(time=bar.time, value=value, color=color))
    return points


class Indicator(ABC):
    """
    Base class for all indicators.

    Subclasses declare `id`, `metadata` and `inputs_class` and implement
    calculate(). Indicators are stateless apart from their validated inputs:
    calling calculate() twice on the same bars gives identical results.
    """

    id: ClassVar[str] = ""
    name: ClassVar[str] = ""
    category: ClassVar[str] = ""
    description: ClassVar[str] = ""
    metadata: ClassVar[IndicatorMetadata]
    inputs_class: ClassVar[Type]

    def __init__(self, inputs: Any = None, **overrides):
        if inputs is not None and overrides:
            raise InvalidInputError("pass either an inputs object or keyword overrides, not both")
        if inputs is None:
            inputs = resolve_inputs(self.inputs_class, overrides)
        elif not isinstance(inputs, self.inputs_class):
            inputs = resolve_inputs(self.inputs_class, inputs)
        self.inputs = inputs

    @abstractmethod
    def calculate(self, bars: Sequence[Bar]) -> IndicatorResult:
        """
        Calculate indicator plots from bar data.

        Args:
            bars: Bars ordered by time

        Returns:
            IndicatorResult whose plots each hold one point per bar
        """
        pass

    def run(self, bars: Sequence[Bar]) -> IndicatorResult:
        """calculate() with input checks and debug timing."""
        bars = list(bars)
        if not bars:
            raise EmptySeriesError(f"{self.id}: cannot calculate on an empty bar sequence")
        t0 = time.perf_counter()
        result = self.calculate(bars)
        logger.debug(
            "Calculated %s over %d bars in %.4fs", self.id, len(bars), time.perf_counter() - t0
        )
        return result

    def get_value_at(
        self,
        bars: Sequence[Bar],
        timestamp: Any,
        plot_id: str = "plot0",
    ) -> Optional[float]:
        """
        Get one plot's value at a specific bar time.

        Returns:
            Value at timestamp, or None if the time is unknown or the value is
            still in warm-up
        """
        result = self.run(bars)
        for point in result.plots[plot_id]:
            if point.time == timestamp:
                return None if math.isnan(point.value) else point.value
        return None

    def result(self, plots, fills=None, hlines=None) -> IndicatorResult:
        return IndicatorResult(
            metadata=self.metadata,
            plots=plots,
            fills=list(fills or []),
            hlines=list(hlines or []),
        )
