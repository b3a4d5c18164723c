import pytest
from google.api_core import exceptions
from google.auth import exceptions as auth_exceptions

from vertexbench.errors import OperationTimeoutError, RemoteError
from vertexbench.operations import get_operation_status, wait_for_operation

PROJECT = "proj1"
LOCATION = "us-central1-a"
OP = "projects/proj1/locations/us-central1-a/operations/operation-1"


@pytest.fixture
def mock_client(mocker):
    mocker.patch("vertexbench.clients.load_credentials")
    mock_get_client = mocker.patch("vertexbench.clients.get_notebook_client")
    return mock_get_client.return_value


def _op(mocker, done, error=None):
    op = mocker.Mock()
    op.name = OP
    op.done = done
    op.HasField.return_value = error is not None
    if error:
        op.error.code, op.error.message = error
    return op


def test_get_operation_status_pending(mock_client, mocker):
    mock_client.get_operation.return_value = _op(mocker, done=False)

    status = get_operation_status(PROJECT, LOCATION, OP)

    assert status.name == OP
    assert status.done is False
    assert status.succeeded is False
    assert mock_client.get_operation.call_args.kwargs["request"].name == OP
    mock_client.transport.close.assert_called_once()


def test_wait_for_operation_polls_until_done(mock_client, mocker):
    mock_client.get_operation.side_effect = [
        _op(mocker, done=False),
        _op(mocker, done=False),
        _op(mocker, done=True),
    ]

    status = wait_for_operation(PROJECT, LOCATION, OP, interval=0)

    assert status.succeeded is True
    assert mock_client.get_operation.call_count == 3
    # One session for the whole watch
    mock_client.transport.close.assert_called_once()


def test_wait_for_operation_reports_failure(mock_client, mocker):
    mock_client.get_operation.return_value = _op(
        mocker, done=True, error=(9, "Instance is not in a startable state")
    )

    status = wait_for_operation(PROJECT, LOCATION, OP, interval=0)

    assert status.done is True
    assert status.succeeded is False
    assert status.error_code == 9
    assert "startable" in status.error_message


def test_wait_for_operation_times_out(mock_client, mocker):
    mock_client.get_operation.return_value = _op(mocker, done=False)

    with pytest.raises(OperationTimeoutError) as excinfo:
        wait_for_operation(PROJECT, LOCATION, OP, timeout=0, interval=0)

    assert excinfo.value.operation_name == OP
    mock_client.transport.close.assert_called_once()


def test_wait_for_operation_remote_error_is_not_retried(mock_client):
    mock_client.get_operation.side_effect = exceptions.NotFound("no such operation")

    with pytest.raises(RemoteError) as excinfo:
        wait_for_operation(PROJECT, LOCATION, OP, interval=0)

    assert excinfo.value.code == 404
    assert mock_client.get_operation.call_count == 1


def test_wait_for_operation_auth_failure_is_remote_error(mock_client):
    mock_client.get_operation.side_effect = auth_exceptions.RefreshError("token expired")

    with pytest.raises(RemoteError) as excinfo:
        wait_for_operation(PROJECT, LOCATION, OP, interval=0)

    assert isinstance(excinfo.value.__cause__, auth_exceptions.RefreshError)
    assert "token expired" in str(excinfo.value)
    assert mock_client.get_operation.call_count == 1
    mock_client.transport.close.assert_called_once()


def test_wait_for_operation_stops_before_sleeping_past_bound(mock_client, mocker):
    mock_client.get_operation.return_value = _op(mocker, done=False)
    mock_sleep = mocker.patch("time.sleep")

    # The first back-off (20s) already crosses the 10s bound
    with pytest.raises(OperationTimeoutError):
        wait_for_operation(PROJECT, LOCATION, OP, timeout=10, interval=20)

    assert mock_client.get_operation.call_count == 1
    mock_sleep.assert_not_called()


def test_wait_for_operation_caps_call_deadline(mock_client, mocker):
    mock_client.get_operation.return_value = _op(mocker, done=True)

    wait_for_operation(PROJECT, LOCATION, OP, timeout=10, interval=0)

    # Per-call deadline is 60s by default, but only 10s of the bound remain
    assert mock_client.get_operation.call_args.kwargs["timeout"] <= 10
