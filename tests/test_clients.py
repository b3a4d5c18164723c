import pytest

from vertexbench.clients import (
    NotebookSession,
    connect,
    get_notebook_client,
    notebook_session,
)
from vertexbench.errors import ClientConnectionError, CredentialError
from vertexbench.schemas.config import ClientConfig


def test_get_notebook_client_endpoint_override(mocker):
    mock_cls = mocker.patch("vertexbench.clients.notebooks_v2.NotebookServiceClient")
    creds = mocker.Mock()

    get_notebook_client(creds, "us-central1-notebooks.googleapis.com")

    kwargs = mock_cls.call_args.kwargs
    assert kwargs["credentials"] is creds
    assert kwargs["client_options"].api_endpoint == "us-central1-notebooks.googleapis.com"


def test_get_notebook_client_default_endpoint(mocker):
    mock_cls = mocker.patch("vertexbench.clients.notebooks_v2.NotebookServiceClient")

    get_notebook_client(mocker.Mock())

    assert mock_cls.call_args.kwargs["client_options"] is None


def test_session_is_bound_to_project_and_location(mocker):
    session = NotebookSession(mocker.Mock(), "proj1", "us-central1-a")

    assert session.parent == "projects/proj1/locations/us-central1-a"
    assert session.name_for("nb-1") == (
        "projects/proj1/locations/us-central1-a/instances/nb-1"
    )


def test_session_close_is_idempotent(mocker):
    client = mocker.Mock()
    with NotebookSession(client, "proj1", "us-central1-a") as session:
        pass
    session.close()

    client.transport.close.assert_called_once()


def test_connect_failure(mocker):
    mocker.patch(
        "vertexbench.clients.get_notebook_client",
        side_effect=ValueError("bad client options"),
    )

    with pytest.raises(ClientConnectionError, match="proj1"):
        connect("proj1", "us-central1-a", mocker.Mock(), ClientConfig())


def test_notebook_session_releases_on_error(mocker):
    mocker.patch("vertexbench.clients.load_credentials")
    mock_get = mocker.patch("vertexbench.clients.get_notebook_client")

    with pytest.raises(RuntimeError):
        with notebook_session("proj1", "us-central1-a", ClientConfig()):
            raise RuntimeError("boom")

    mock_get.return_value.transport.close.assert_called_once()


def test_notebook_session_credential_failure_skips_client(mocker, tmp_path):
    mock_get = mocker.patch("vertexbench.clients.get_notebook_client")
    config = ClientConfig(credentials_path=str(tmp_path / "missing.json"))

    with pytest.raises(CredentialError):
        with notebook_session("proj1", "us-central1-a", config):
            pass

    mock_get.assert_not_called()
