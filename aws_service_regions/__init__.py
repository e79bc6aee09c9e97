"""AWS Service Regions

Find the AWS regions in which a service is available by reading the
global-infrastructure parameters that AWS publishes in SSM Parameter Store.
"""

__version__ = "1.0.0"
__author__ = "AWS Service Regions"

from .core.config import Config

__all__ = ["Config"]
