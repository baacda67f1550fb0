from unittest.mock import MagicMock, patch

import pytest

pytest.importorskip("databricks.connect")

from sqlt.databricks.client import DatabricksClient  # noqa: E402
from sqlt.introspect.base import SQLClient  # noqa: E402


@pytest.fixture
def mock_session():
    with patch("sqlt.databricks.client.DatabricksSession") as mock_db_session:
        mock_spark = MagicMock()
        mock_builder = MagicMock()
        mock_builder.host.return_value = mock_builder
        mock_builder.token.return_value = mock_builder
        mock_builder.getOrCreate.return_value = mock_spark
        mock_db_session.builder = mock_builder
        yield mock_db_session, mock_builder, mock_spark


def test_client_uses_host_and_token_when_provided(mock_session):
    mock_db_session, mock_builder, _ = mock_session

    client = DatabricksClient(
        host="test.databricks.com",
        token="dapi123",
    )
    client.connect()

    mock_builder.host.assert_called_once_with("test.databricks.com")
    mock_builder.token.assert_called_once_with("dapi123")
    mock_builder.getOrCreate.assert_called_once()


def test_client_uses_env_config_when_no_host_token(mock_session):
    mock_db_session, mock_builder, _ = mock_session

    client = DatabricksClient()
    client.connect()

    mock_builder.host.assert_not_called()
    mock_builder.token.assert_not_called()
    mock_builder.getOrCreate.assert_called_once()


def test_client_is_sql_client():
    client = DatabricksClient()
    assert isinstance(client, SQLClient)
    assert client.driver_name == "databricks"


def test_fetchall_returns_dicts(mock_session):
    _, _, mock_spark = mock_session
    row = MagicMock()
    row.asDict.return_value = {"table_name": "users"}
    mock_spark.sql.return_value.collect.return_value = [row]

    client = DatabricksClient()
    client.connect()

    assert client.fetchall("SELECT 1") == [{"table_name": "users"}]
    mock_spark.sql.assert_called_once_with("SELECT 1")


def test_fetchall_requires_connect():
    with pytest.raises(RuntimeError, match="Not connected"):
        DatabricksClient().fetchall("SELECT 1")


def test_connect_twice_raises(mock_session):
    client = DatabricksClient()
    client.connect()
    with pytest.raises(RuntimeError, match="Already connected"):
        client.connect()


def test_close_stops_session(mock_session):
    _, _, mock_spark = mock_session

    with DatabricksClient() as client:
        pass

    mock_spark.stop.assert_called_once()
    client.close()
    mock_spark.stop.assert_called_once()
