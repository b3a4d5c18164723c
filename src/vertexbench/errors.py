from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from google.api_core import exceptions as api_exceptions
from google.auth import exceptions as auth_exceptions

from .logger import logger


class VertexBenchError(Exception):
    """Base class for every failure surfaced by vertexbench."""


class CredentialError(VertexBenchError):
    """The service identity could not be loaded (missing, unreadable or malformed)."""


class ClientConnectionError(VertexBenchError):
    """A Notebooks API session could not be established."""


class RemoteError(VertexBenchError):
    """
    The Notebooks API rejected or failed a request.

    Not-found, already-exists, invalid state transitions, permission and quota
    failures all land here. They are told apart only by the status and code
    the remote supplied, never classified locally.
    """

    def __init__(
        self, message: str, status: str | None = None, code: int | None = None
    ) -> None:
        self.message = message
        self.status = status
        self.code = code
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.status:
            return f"{self.status}: {self.message}"
        return self.message

    @classmethod
    def from_exception(cls, exc: Exception) -> RemoteError:
        """Builds a RemoteError keeping whatever detail the remote attached."""
        if isinstance(exc, api_exceptions.GoogleAPICallError):
            status = exc.grpc_status_code.name if exc.grpc_status_code else None
            code = int(exc.code) if exc.code is not None else None
            return cls(exc.message or str(exc), status=status, code=code)
        return cls(str(exc) or type(exc).__name__, status=type(exc).__name__)


class OperationTimeoutError(VertexBenchError):
    """A long-running operation did not finish within the watcher's bound."""

    def __init__(self, operation_name: str, timeout: float) -> None:
        self.operation_name = operation_name
        self.timeout = timeout
        super().__init__(
            f"Operation {operation_name} did not complete within {timeout:.0f}s"
        )


@contextmanager
def remote_call(action: str, target: str) -> Iterator[None]:
    """Turns API and auth failures raised inside the block into RemoteError."""
    try:
        yield
    except (api_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as e:
        logger.debug(f"Failed to {action} {target}: {e}")
        raise RemoteError.from_exception(e) from e
