"""Processors for region and service catalogs and availability probing."""

from .availability import AvailabilityProbeError, AvailabilityProber
from .base import (BaseProcessor, ProcessingContext, ProcessingError,
                   ProcessingValidationError)
from .catalog import RegionCatalog, ServiceCatalog

__all__ = [
    'BaseProcessor',
    'ProcessingContext',
    'ProcessingError',
    'ProcessingValidationError',
    'RegionCatalog',
    'ServiceCatalog',
    'AvailabilityProber',
    'AvailabilityProbeError',
]
