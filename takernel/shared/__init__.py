"""
Shared types, defaults and errors for the kernel.

This module provides:
- Bar, SourceType, MAType and the plot/result records
- Centralized default values for all indicator parameters
- Configuration error classes
"""
from .types import (
    Bar,
    SourceType,
    MAType,
    PlotPoint,
    FillData,
    HLine,
    IndicatorMetadata,
    IndicatorResult,
)
from .errors import (
    KernelConfigError,
    InvalidLengthError,
    EmptySeriesError,
    SeriesAlignmentError,
    InvalidInputError,
    UnknownIndicatorError,
)

__all__ = [
    'Bar',
    'SourceType',
    'MAType',
    'PlotPoint',
    'FillData',
    'HLine',
    'IndicatorMetadata',
    'IndicatorResult',
    'KernelConfigError',
    'InvalidLengthError',
    'EmptySeriesError',
    'SeriesAlignmentError',
    'InvalidInputError',
    'UnknownIndicatorError',
]
