import time
from typing import Any

from google.longrunning import operations_pb2
from tenacity import (
    RetryError,
    Retrying,
    retry_if_result,
    stop_before_delay,
    wait_exponential,
)

from .clients import notebook_session
from .core import (
    DEFAULT_POLL_INTERVAL,
    DEFAULT_WAIT_TIMEOUT,
    MAX_POLL_INTERVAL,
    MIN_CALL_TIMEOUT,
)
from .errors import OperationTimeoutError, remote_call
from .logger import logger
from .schemas.config import ClientConfig
from .schemas.notebook import OperationStatus


def _fetch_status(session: Any, operation_name: str, timeout: float | None) -> OperationStatus:
    with remote_call("poll", operation_name):
        op = session.client.get_operation(
            request=operations_pb2.GetOperationRequest(name=operation_name),
            retry=None,
            timeout=timeout,
        )

    status = OperationStatus(name=op.name or operation_name, done=bool(op.done))
    if op.done and op.HasField("error"):
        status.error_code = op.error.code
        status.error_message = op.error.message
    logger.debug(f"Operation {status.name}: done={status.done}")
    return status


def get_operation_status(
    project_id: str,
    location: str,
    operation_name: str,
    config: ClientConfig | None = None,
) -> OperationStatus:
    """Reads the current state of a long-running operation once."""
    config = config or ClientConfig()
    with notebook_session(project_id, location, config) as session:
        return _fetch_status(session, operation_name, config.timeout)


def wait_for_operation(
    project_id: str,
    location: str,
    operation_name: str,
    config: ClientConfig | None = None,
    timeout: float = DEFAULT_WAIT_TIMEOUT,
    interval: float = DEFAULT_POLL_INTERVAL,
) -> OperationStatus:
    """
    Polls an operation until it is done or the time bound runs out.

    The loop stops before any sleep that would cross `timeout`, and each
    poll's deadline is capped at the time left. Raises OperationTimeoutError
    when the bound is reached. A RemoteError while polling is raised straight
    away.
    """
    config = config or ClientConfig()
    poller = Retrying(
        stop=stop_before_delay(timeout),
        wait=wait_exponential(multiplier=interval, max=MAX_POLL_INTERVAL),
        retry=retry_if_result(lambda status: not status.done),
    )

    deadline = time.monotonic() + timeout

    def _call_timeout() -> float:
        remaining = max(deadline - time.monotonic(), MIN_CALL_TIMEOUT)
        if config.timeout is None:
            return remaining
        return min(config.timeout, remaining)

    logger.info(f"Waiting up to {timeout:.0f}s for operation: {operation_name}")
    with notebook_session(project_id, location, config) as session:
        try:
            status = poller(
                lambda: _fetch_status(session, operation_name, _call_timeout())
            )
        except RetryError as e:
            raise OperationTimeoutError(operation_name, timeout) from e

    if status.error_code is not None:
        logger.warning(f"Operation {operation_name} failed: {status.error_message}")
    return status
