from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from google.api_core.client_options import ClientOptions
from google.auth import exceptions as auth_exceptions
from google.cloud import notebooks_v2

from .credentials import load_credentials
from .errors import ClientConnectionError
from .logger import logger
from .naming import instance_name, parent_path
from .schemas.config import ClientConfig


def get_notebook_client(credentials: Any, api_endpoint: str | None = None) -> Any:
    client_options = ClientOptions(api_endpoint=api_endpoint) if api_endpoint else None
    return notebooks_v2.NotebookServiceClient(
        credentials=credentials, client_options=client_options
    )


class NotebookSession:
    """A Notebooks API client bound to one project/location and one credential."""

    def __init__(self, client: Any, project_id: str, location: str) -> None:
        self.client = client
        self.project_id = project_id
        self.location = location
        self._closed = False

    @property
    def parent(self) -> str:
        return parent_path(self.project_id, self.location)

    def name_for(self, instance_id: str) -> str:
        return instance_name(self.project_id, self.location, instance_id)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.client.transport.close()

    def __enter__(self) -> NotebookSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def connect(
    project_id: str, location: str, credentials: Any, config: ClientConfig
) -> NotebookSession:
    """Builds a session for a single orchestration call."""
    try:
        client = get_notebook_client(credentials, config.api_endpoint)
    except (auth_exceptions.GoogleAuthError, ValueError, OSError) as e:
        raise ClientConnectionError(
            f"Could not create Notebooks client for {parent_path(project_id, location)}: {e}"
        ) from e
    return NotebookSession(client, project_id, location)


@contextmanager
def notebook_session(
    project_id: str, location: str, config: ClientConfig
) -> Iterator[NotebookSession]:
    """
    Scoped session: credentials are loaded, a client is connected, and the
    transport is closed again on every exit path.
    """
    credentials = load_credentials(config.credentials_path)
    session = connect(project_id, location, credentials, config)
    logger.debug(f"Opened Notebooks session for {session.parent}")
    try:
        yield session
    finally:
        session.close()
