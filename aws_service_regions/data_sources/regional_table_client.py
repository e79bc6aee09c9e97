"""Client for the public AWS regional services table.

The table lists one entry per (region, service) pair with the service's
marketing name, which the parameter store does not expose under the per-region
services path.
"""

from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..core.error_handling import RemoteQueryError
from ..core.logging import get_logger
from .base import DataSource

REGIONAL_TABLE_URL = (
    "https://api.regional-table.region-services.aws.a2z.com/index.json"
)


class RegionalTableClient(DataSource):
    """Fetch service names from the AWS regional services table."""

    def __init__(self, url=REGIONAL_TABLE_URL, timeout=30, max_retries=3,
                 backoff_factor=0.5, session=None):
        """Initialize regional table client.

        Args:
            url: Index document URL
            timeout: HTTP request timeout in seconds
            max_retries: Maximum number of retry attempts for failed requests
            backoff_factor: Backoff factor for exponential delay between retries
            session: Pre-built requests session (used instead of creating one)
        """
        self.url = url
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.logger = get_logger("regional_table_client")
        self._session = session

    def _get_session(self) -> requests.Session:
        """Get HTTP session with retry configuration."""
        if self._session is None:
            self._session = requests.Session()

            retry_strategy = Retry(
                total=self.max_retries,
                backoff_factor=self.backoff_factor,
                status_forcelist=[429, 500, 502, 503, 504],
                allowed_methods=["HEAD", "GET", "OPTIONS"],
            )

            adapter = HTTPAdapter(max_retries=retry_strategy)
            self._session.mount("http://", adapter)
            self._session.mount("https://", adapter)
            self._session.headers.update({"Accept": "application/json"})

        return self._session

    def fetch_data(self, data_type: str = "service_names", **kwargs) -> Optional[List[str]]:
        if data_type == "service_names":
            return self.fetch_service_names()

        self.logger.error(f"Unknown regional table data type: {data_type}")
        return None

    def fetch_index(self) -> Dict[str, Any]:
        """Download and decode the index document.

        Raises:
            RemoteQueryError: On HTTP failure or an undecodable body
        """
        try:
            response = self._get_session().get(self.url, timeout=self.timeout)
            response.raise_for_status()
            document = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            self.logger.error(f"Failed to fetch regional table: {e}")
            raise RemoteQueryError(self.url, e) from e

        if not isinstance(document, dict):
            raise RemoteQueryError(self.url, ValueError("index is not a JSON object"))

        self.logger.info(
            f"Fetched regional table ({len(response.content)} bytes)",
            source_version=document.get("metadata", {}).get("source:version"),
        )
        return document

    def fetch_service_names(self) -> List[str]:
        """Return the sorted, de-duplicated service names in the table.

        Raises:
            RemoteQueryError: If the table cannot be fetched or parsed
        """
        document = self.fetch_index()

        names = set()
        for entry in document.get("prices", []):
            name = entry.get("attributes", {}).get("aws:serviceName")
            if name:
                names.add(name)

        self.logger.info(f"Found {len(names)} service names in regional table")
        return sorted(names)
