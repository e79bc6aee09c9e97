"""Base interface for data sources."""

from abc import ABC, abstractmethod
from typing import Any


class DataSource(ABC):
    """Abstract base class for all data sources."""

    @abstractmethod
    def fetch_data(self, data_type: str, **kwargs) -> Any:
        """Fetch data from the source.

        Args:
            data_type: Source-specific data type
            **kwargs: Source-specific parameters

        Returns:
            Fetched data in source-specific format
        """
        pass


class AWSDataSource(DataSource):
    """Base class for AWS-specific data sources."""

    def __init__(self, aws_session=None):
        """Initialize AWS data source.

        Args:
            aws_session: Boto3 session for AWS API calls
        """
        self.aws_session = aws_session

    @abstractmethod
    def get_client(self):
        """Get the appropriate AWS service client."""
        pass
