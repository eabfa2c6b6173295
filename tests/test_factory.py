"""Tests for connector dispatch on DataSource.type."""

import pytest

from conftest import FakeHTTPClient, make_data_source
from incident_sync.models import ConnectorType
from incident_sync.sync.services import (
    AzureStatusConnector,
    ConnectorFactory,
    GitHubStatusConnector,
    JiraConnector,
    StatusPageConnector,
    UnsupportedConnectorError,
)


@pytest.mark.parametrize(
    "source_type, connector_class",
    [
        ("statuspage", StatusPageConnector),
        ("github-status", GitHubStatusConnector),
        ("azure-status", AzureStatusConnector),
        ("jira", JiraConnector),
    ],
)
def test_create_dispatches_on_type(source_type, connector_class) -> None:
    source = make_data_source(type=source_type)
    client = FakeHTTPClient()

    connector = ConnectorFactory.create(source, client)

    assert isinstance(connector, connector_class)
    assert connector.data_source is source
    assert connector.client is client


def test_enum_member_is_accepted() -> None:
    source = make_data_source(type=ConnectorType.JIRA)

    assert isinstance(ConnectorFactory.create(source, FakeHTTPClient()), JiraConnector)


def test_unknown_type_raises() -> None:
    source = make_data_source(type="pagerduty")

    with pytest.raises(UnsupportedConnectorError, match="Unsupported connector type: pagerduty"):
        ConnectorFactory.create(source, FakeHTTPClient())


def test_unsupported_type_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        ConnectorFactory.create(make_data_source(type=""), FakeHTTPClient())


def test_supported_types_cover_every_connector_type() -> None:
    assert sorted(ConnectorFactory.supported_types()) == sorted(t.value for t in ConnectorType)
