"""Shared fixtures: an in-memory stand-in for the boto3 SSM client."""

import os
import sys
import threading
import time
from typing import Dict, List, Optional
from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError
from botocore.paginate import TokenDecoder

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from aws_service_regions.core.config import Config
from aws_service_regions.data_sources.aws_ssm_client import (REGIONS_PATH,
                                                              AWSSSMClient,
                                                              services_path)
from aws_service_regions.processors.base import ProcessingContext


def client_error(code: str, message: str = "") -> ClientError:
    return ClientError(
        {"Error": {"Code": code, "Message": message or code}}, "GetParametersByPath"
    )


class FakePaginator:
    """Pages through a ``get_parameters_by_path`` callable the way botocore does.

    Pages are requested lazily; ``StartingToken`` uses botocore's token encoding.
    """

    def __init__(self, operation):
        self.operation = operation

    def paginate(self, Path, Recursive=False, PaginationConfig=None):
        config = PaginationConfig or {}
        token = None
        if config.get("StartingToken"):
            token = TokenDecoder().decode(config["StartingToken"])["NextToken"]
        return self._pages(Path, Recursive, config.get("PageSize"), token)

    def _pages(self, path, recursive, page_size, token):
        while True:
            response = self.operation(
                Path=path, Recursive=recursive, MaxResults=page_size, NextToken=token
            )
            yield response
            token = response.get("NextToken")
            if not token:
                return


def paginating_mock() -> Mock:
    """A Mock SSM client whose paginator drives its ``get_parameters_by_path``."""
    boto_client = Mock()
    boto_client.get_paginator.side_effect = lambda name: FakePaginator(
        getattr(boto_client, name)
    )
    return boto_client


class FakeSSM:
    """Serves ``get_parameters_by_path`` from a path -> children mapping.

    Paginates with numeric NextToken values, can fail on chosen paths, and
    records call order plus the peak number of calls in flight at once.
    """

    def __init__(
        self,
        children: Dict[str, List[str]],
        page_size: int = 10,
        failures: Optional[Dict[str, Exception]] = None,
        delay: float = 0.0,
        events: Optional[list] = None,
    ):
        self.children = children
        self.page_size = page_size
        self.failures = failures or {}
        self.delay = delay
        self.events = events if events is not None else []
        self.calls: List[dict] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def get_paginator(self, operation_name):
        assert operation_name == "get_parameters_by_path"
        return FakePaginator(self.get_parameters_by_path)

    def get_parameters_by_path(self, Path, Recursive=False, MaxResults=None, NextToken=None):
        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            self.calls.append({"Path": Path, "MaxResults": MaxResults, "NextToken": NextToken})
            self.events.append(("call", Path))
        try:
            if self.delay:
                time.sleep(self.delay)

            failure = self.failures.get(Path)
            if failure is not None:
                raise failure

            names = self.children.get(Path, [])
            size = MaxResults or self.page_size
            start = int(NextToken or 0)
            response = {
                "Parameters": [
                    {"Name": f"{Path}/{name}", "Type": "String", "Value": name}
                    for name in names[start:start + size]
                ]
            }
            if start + size < len(names):
                response["NextToken"] = str(start + size)
            return response
        finally:
            with self._lock:
                self.in_flight -= 1


def build_store(available: Dict[str, List[str]]) -> Dict[str, List[str]]:
    """Build a path -> children mapping from region -> services."""
    store = {REGIONS_PATH: list(available)}
    for region, services in available.items():
        store[services_path(region)] = list(services)
    return store


def make_context(fake: FakeSSM, **config_overrides) -> ProcessingContext:
    config = Config(**config_overrides)
    ssm_client = AWSSSMClient(client=fake, max_retries=2, base_delay=0.0)
    return ProcessingContext(config=config, ssm_client=ssm_client, logger_name="test")


@pytest.fixture
def sample_store():
    """Four regions; lambda missing from ap-south-1 and pagination needed in us-east-1."""
    us_east_services = [f"service{i:02d}" for i in range(25)] + ["lambda", "s3", "ec2"]
    return build_store(
        {
            "us-east-1": us_east_services,
            "eu-west-1": ["ec2", "lambda", "s3"],
            "ap-south-1": ["ec2", "s3"],
            "us-west-2": ["ec2", "s3", "lambda"],
        }
    )
