"""Data sources for fetching region and service data."""

from .aws_ssm_client import (REGIONS_PATH, AWSSSMClient, last_path_segment,
                             services_path)
from .regional_table_client import RegionalTableClient

__all__ = [
    'AWSSSMClient',
    'RegionalTableClient',
    'REGIONS_PATH',
    'last_path_segment',
    'services_path',
]
