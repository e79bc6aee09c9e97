"""AWS SSM Parameter Store client for listing global-infrastructure parameters."""

import threading
from typing import Iterator, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from botocore.paginate import TokenEncoder

from ..core.error_handling import (ErrorHandler, NonRetryableError,
                                   RemoteQueryError, RetryableError,
                                   with_retry)
from ..core.logging import get_logger
from .base import AWSDataSource

REGIONS_PATH = "/aws/service/global-infrastructure/regions"


def services_path(region: str) -> str:
    """Parameter path holding one child per service available in ``region``."""
    return f"{REGIONS_PATH}/{region}/services"


def last_path_segment(name: str) -> str:
    """Return the final segment of a parameter name.

    ``/aws/service/global-infrastructure/regions/us-east-1`` -> ``us-east-1``
    """
    return name.rstrip("/").rsplit("/", 1)[-1]


class AWSSSMClient(AWSDataSource):
    """Paginated, read-only access to SSM parameter paths.

    Listings go through the boto3 ``get_parameters_by_path`` paginator. A single
    instance is meant to be shared by concurrent callers: the underlying boto3
    client is created once (under a lock) and boto3 low-level clients are
    thread-safe. Each page request is retried on throttling and transient
    network errors; anything that still fails surfaces as RemoteQueryError.
    """

    def __init__(
        self,
        aws_session=None,
        region="us-east-1",
        max_retries=3,
        base_delay=1.0,
        client=None,
    ):
        """Initialize SSM client.

        Args:
            aws_session: Boto3 session for AWS API calls
            region: AWS region for SSM client operations
            max_retries: Maximum retry attempts for a failed page request
            base_delay: Base delay for exponential backoff (seconds)
            client: Pre-built SSM client (used instead of creating one)
        """
        super().__init__(aws_session)
        self.region = region
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.logger = get_logger(f"ssm_client.{region}")
        self._client = client
        self._client_lock = threading.Lock()

        self._error_handler = ErrorHandler()
        retry_config = self._error_handler.get_aws_retry_config(
            max_attempts=max_retries + 1, base_delay=base_delay
        )
        self._fetch_page_with_retry = with_retry(retry_config)(self._fetch_page)

    def get_client(self):
        """Get SSM client with connection reuse."""
        with self._client_lock:
            if self._client is None:
                if self.aws_session:
                    self._client = self.aws_session.client("ssm", region_name=self.region)
                else:
                    self._client = boto3.client("ssm", region_name=self.region)
                self.logger.info(f"Initialized SSM client for region: {self.region}")
            return self._client

    def fetch_data(self, data_type: str, **kwargs) -> Optional[List[str]]:
        """Fetch data based on type.

        This is the entry point the catalogs use; it returns complete sorted
        listings. Callers that need page-at-a-time access with early exit use
        ``iter_children_pages`` instead.

        Args:
            data_type: 'regions' or 'services'
            **kwargs: ``region`` and ``max_results`` for 'services'

        Returns:
            Sorted list of identifiers, or None for an unknown data type

        Raises:
            RemoteQueryError: If any page cannot be fetched
        """
        if data_type == "regions":
            return sorted(self.list_children(REGIONS_PATH))
        elif data_type == "services":
            region = kwargs.get("region", "us-east-1")
            return sorted(
                self.list_children(services_path(region), kwargs.get("max_results"))
            )

        self.logger.error(f"Unknown data type: {data_type}")
        return None

    def _open_pages(self, cursor: "_PageCursor") -> Iterator[dict]:
        """Start a GetParametersByPath paginator at the cursor's position."""
        pagination_config = {}
        if cursor.max_results:
            pagination_config["PageSize"] = cursor.max_results
        if cursor.next_token:
            pagination_config["StartingToken"] = TokenEncoder().encode(
                {"NextToken": cursor.next_token}
            )

        paginator = self.get_client().get_paginator("get_parameters_by_path")
        return iter(
            paginator.paginate(
                Path=cursor.path, Recursive=False, PaginationConfig=pagination_config
            )
        )

    def _fetch_page(self, cursor: "_PageCursor") -> Optional[List[str]]:
        """Fetch the next page for ``cursor``.

        A failed page drops the paginator; the retry reopens it from the last
        NextToken seen, so pages already returned are not requested again.

        Returns:
            Parameter names on the page, or None when there are no more pages
        """
        if cursor.pages is None:
            cursor.pages = self._open_pages(cursor)

        try:
            page = next(cursor.pages)
        except StopIteration:
            return None
        except Exception as e:
            # The paginator cannot continue after raising
            cursor.pages = None
            if not isinstance(e, (ClientError, BotoCoreError)):
                raise
            should_retry, category = self._error_handler.classify_aws_error(e)
            self.logger.debug(
                "Page request failed", path=cursor.path, category=category, error=str(e)
            )
            if should_retry:
                raise RetryableError(f"{category} error listing {cursor.path}: {e}") from e
            raise NonRetryableError(f"{category} error listing {cursor.path}: {e}") from e

        try:
            names = [param["Name"] for param in page["Parameters"]]
        except (KeyError, TypeError) as e:
            raise NonRetryableError(f"Malformed response listing {cursor.path}: {e}") from e

        cursor.next_token = page.get("NextToken")
        return names

    def iter_children_pages(
        self, path: str, max_results: Optional[int] = None
    ) -> Iterator[List[str]]:
        """Yield the immediate children of ``path`` one page at a time.

        Pages are fetched lazily, so a consumer that stops iterating stops
        issuing requests.

        Args:
            path: Parameter path to list
            max_results: Requested page size (SSM caps this at 10)

        Yields:
            Child identifiers (last path segment) for each page

        Raises:
            RemoteQueryError: If a page cannot be fetched
        """
        cursor = _PageCursor(path, max_results)
        page_count = 0

        while True:
            try:
                names = self._fetch_page_with_retry(cursor)
            except (RetryableError, NonRetryableError, ConnectionError, TimeoutError) as e:
                cause = e.__cause__ or e
                self.logger.error(f"Failed to list parameters under {path}: {cause}")
                raise RemoteQueryError(path, cause) from e

            if names is None:
                self.logger.debug(f"Listed {page_count} pages under {path}")
                return

            page_count += 1
            yield [last_path_segment(name) for name in names]

    def list_children(self, path: str, max_results: Optional[int] = None) -> List[str]:
        """List the immediate children of ``path`` across all pages.

        Args:
            path: Parameter path to list
            max_results: Requested page size

        Returns:
            Child identifiers in the order the store returned them

        Raises:
            RemoteQueryError: If any page cannot be fetched
        """
        children: List[str] = []
        for page in self.iter_children_pages(path, max_results):
            children.extend(page)

        self.logger.info(f"Found {len(children)} parameters under {path}")
        return children


class _PageCursor:
    """Position within one paginated listing."""

    def __init__(self, path: str, max_results: Optional[int]):
        self.path = path
        self.max_results = max_results
        self.next_token: Optional[str] = None
        self.pages: Optional[Iterator[dict]] = None
