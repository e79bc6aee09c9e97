"""Tests for the paginated SSM parameter client."""

from unittest.mock import Mock

import boto3
import pytest
from botocore.stub import Stubber

from aws_service_regions.core.error_handling import RemoteQueryError
from aws_service_regions.data_sources.aws_ssm_client import (
    REGIONS_PATH, AWSSSMClient, last_path_segment, services_path)
from tests.conftest import FakeSSM, build_store, client_error, paginating_mock


def test_last_path_segment():
    assert last_path_segment("/aws/service/global-infrastructure/regions/us-east-1") == "us-east-1"
    assert last_path_segment("/aws/service/global-infrastructure/regions/us-east-1/") == "us-east-1"
    assert last_path_segment("lambda") == "lambda"


def test_services_path():
    assert services_path("eu-west-1") == "/aws/service/global-infrastructure/regions/eu-west-1/services"


def test_list_children_follows_next_token():
    names = [f"svc{i:02d}" for i in range(23)]
    fake = FakeSSM({"/p": names}, page_size=10)
    client = AWSSSMClient(client=fake, base_delay=0.0)

    assert client.list_children("/p") == names
    assert [call["NextToken"] for call in fake.calls] == [None, "10", "20"]


def test_list_children_passes_max_results():
    fake = FakeSSM({"/p": ["a", "b", "c"]})
    client = AWSSSMClient(client=fake, base_delay=0.0)

    assert client.list_children("/p", max_results=2) == ["a", "b", "c"]
    assert all(call["MaxResults"] == 2 for call in fake.calls)
    assert len(fake.calls) == 2


def test_iter_children_pages_is_lazy():
    fake = FakeSSM({"/p": [f"s{i}" for i in range(30)]}, page_size=10)
    client = AWSSSMClient(client=fake, base_delay=0.0)

    pages = client.iter_children_pages("/p")
    assert next(pages) == [f"s{i}" for i in range(10)]
    pages.close()

    assert len(fake.calls) == 1


def test_unknown_path_has_no_children():
    client = AWSSSMClient(client=FakeSSM({}), base_delay=0.0)
    assert client.list_children("/missing") == []


def test_throttling_is_retried():
    fake = FakeSSM({"/p": ["a"]})
    pending_errors = [client_error("ThrottlingException", "Rate exceeded")]

    def flaky(**kwargs):
        if pending_errors:
            raise pending_errors.pop()
        return fake.get_parameters_by_path(**kwargs)

    boto_client = paginating_mock()
    boto_client.get_parameters_by_path.side_effect = flaky
    client = AWSSSMClient(client=boto_client, max_retries=2, base_delay=0.0)

    assert client.list_children("/p") == ["a"]
    assert boto_client.get_parameters_by_path.call_count == 2


def test_failed_page_resumes_from_last_token():
    names = [f"svc{i:02d}" for i in range(25)]
    fake = FakeSSM({"/p": names}, page_size=10)
    pending_errors = [client_error("ThrottlingException", "Rate exceeded")]

    def flaky(**kwargs):
        if kwargs["NextToken"] == "10" and pending_errors:
            raise pending_errors.pop()
        return fake.get_parameters_by_path(**kwargs)

    boto_client = paginating_mock()
    boto_client.get_parameters_by_path.side_effect = flaky
    client = AWSSSMClient(client=boto_client, max_retries=2, base_delay=0.0)

    assert client.list_children("/p") == names
    assert [call["NextToken"] for call in fake.calls] == [None, "10", "20"]
    assert boto_client.get_paginator.call_count == 2


def test_listing_uses_the_boto3_paginator():
    ssm = boto3.client(
        "ssm",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
    stubber = Stubber(ssm)
    request = {"Path": "/p", "Recursive": False, "MaxResults": 1}
    stubber.add_response(
        "get_parameters_by_path",
        {"Parameters": [{"Name": "/p/a"}], "NextToken": "page-2"},
        request,
    )
    stubber.add_client_error(
        "get_parameters_by_path",
        service_error_code="ThrottlingException",
        service_message="Rate exceeded",
        expected_params=dict(request, NextToken="page-2"),
    )
    stubber.add_response(
        "get_parameters_by_path",
        {"Parameters": [{"Name": "/p/b"}]},
        dict(request, NextToken="page-2"),
    )

    client = AWSSSMClient(client=ssm, max_retries=1, base_delay=0.0)
    with stubber:
        assert client.list_children("/p", max_results=1) == ["a", "b"]
    stubber.assert_no_pending_responses()


def test_retries_exhausted_raise_remote_query_error():
    boto_client = paginating_mock()
    boto_client.get_parameters_by_path.side_effect = client_error("ThrottlingException")
    client = AWSSSMClient(client=boto_client, max_retries=2, base_delay=0.0)

    with pytest.raises(RemoteQueryError) as exc_info:
        client.list_children("/p")

    assert exc_info.value.path == "/p"
    assert boto_client.get_parameters_by_path.call_count == 3


def test_access_denied_is_not_retried():
    boto_client = paginating_mock()
    boto_client.get_parameters_by_path.side_effect = client_error(
        "AccessDeniedException", "User is not authorized"
    )
    client = AWSSSMClient(client=boto_client, max_retries=3, base_delay=0.0)

    with pytest.raises(RemoteQueryError) as exc_info:
        client.list_children(REGIONS_PATH)

    assert boto_client.get_parameters_by_path.call_count == 1
    assert "AccessDenied" in str(exc_info.value)


def test_malformed_response_raises_remote_query_error():
    boto_client = paginating_mock()
    boto_client.get_parameters_by_path.return_value = {"Unexpected": []}
    client = AWSSSMClient(client=boto_client, base_delay=0.0)

    with pytest.raises(RemoteQueryError):
        client.list_children("/p")
    assert boto_client.get_parameters_by_path.call_count == 1


def test_fetch_data_types():
    fake = FakeSSM(build_store({"us-east-1": ["s3", "ec2"], "eu-west-1": ["ec2"]}))
    client = AWSSSMClient(client=fake, base_delay=0.0)

    assert client.fetch_data("regions") == ["eu-west-1", "us-east-1"]
    assert client.fetch_data("services", region="us-east-1") == ["ec2", "s3"]
    assert client.fetch_data("unknown") is None


def test_get_client_uses_session():
    session = Mock()
    client = AWSSSMClient(aws_session=session, region="eu-west-1")

    assert client.get_client() is session.client.return_value
    assert client.get_client() is session.client.return_value
    session.client.assert_called_once_with("ssm", region_name="eu-west-1")
