"""Output generation for availability results."""

from .report import OUTPUT_FORMATS, AvailabilityReport, OutputError

__all__ = ['OUTPUT_FORMATS', 'AvailabilityReport', 'OutputError']
