"""
Lifecycle operations for Vertex AI Workbench instances.

Every call opens its own session, issues exactly one request (List drains
its pages), and returns either data or the name of the long-running
operation the API started. Nothing here waits for an operation to finish;
see vertexbench.operations for that.
"""

from __future__ import annotations

from typing import Any

from google.cloud import notebooks_v2

from .clients import notebook_session
from .core import ACCESS_URL_SCHEME
from .errors import RemoteError, remote_call
from .logger import logger
from .naming import instance_id_from_name
from .schemas.config import ClientConfig
from .schemas.notebook import InstanceDetails, InstanceTemplate
from .templates import DEFAULT_TEMPLATE, to_instance


def _operation_name(operation: Any, action: str, target: str) -> str:
    # A handle is only returned for an accepted request
    name = operation.operation.name
    if not name:
        raise RemoteError(f"No operation returned to {action} {target}")
    return str(name)


class NotebookLifecycle:
    """
    Maps lifecycle verbs onto Notebooks API requests.

    The instance state is never checked locally: if a start, stop or delete
    is not valid right now, the API says so and that error is surfaced.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        template: InstanceTemplate = DEFAULT_TEMPLATE,
    ) -> None:
        self.config = config or ClientConfig()
        self.template = template

    def _session(self, project_id: str, location: str) -> Any:
        return notebook_session(project_id, location, self.config)

    def _call_kwargs(self) -> dict[str, Any]:
        return {"retry": None, "timeout": self.config.timeout}

    def list_instances(self, project_id: str, location: str) -> list[str]:
        """Lists the fully qualified names of all instances in a location."""
        with self._session(project_id, location) as session:
            logger.info(f"Listing instances in: {session.parent}")
            request = notebooks_v2.ListInstancesRequest(parent=session.parent)

            names = []
            with remote_call("list instances in", session.parent):
                # The pager fetches further pages while we iterate
                for instance in session.client.list_instances(
                    request=request, **self._call_kwargs()
                ):
                    logger.debug(f"Found instance: {instance.name}")
                    names.append(instance.name)

            logger.info(f"Total instances found: {len(names)}")
            return names

    def create_instance(
        self,
        project_id: str,
        location: str,
        instance_id: str,
        template: InstanceTemplate | None = None,
    ) -> str:
        """
        Submits creation of a new instance and returns the operation name.
        If the id is already taken the API rejects it with RemoteError.
        """
        template = template or self.template
        with self._session(project_id, location) as session:
            request = notebooks_v2.CreateInstanceRequest(
                parent=session.parent,
                instance_id=instance_id,
                instance=to_instance(template),
            )
            logger.info(
                f"Creating instance: {instance_id} in {session.parent} "
                f"({template.machine_type}, {template.image})"
            )
            with remote_call("create", session.name_for(instance_id)):
                operation = session.client.create_instance(
                    request=request, **self._call_kwargs()
                )
            return _operation_name(operation, "create", session.name_for(instance_id))

    def get_access_url(self, project_id: str, location: str, instance_id: str) -> str:
        """Returns the HTTPS URL of the instance's JupyterLab proxy."""
        details = self.describe_instance(project_id, location, instance_id)
        if not details.proxy_uri:
            logger.warning(f"Instance {details.name} has no proxy URI yet")
        return f"{ACCESS_URL_SCHEME}{details.proxy_uri or ''}"

    def describe_instance(
        self, project_id: str, location: str, instance_id: str
    ) -> InstanceDetails:
        with self._session(project_id, location) as session:
            name = session.name_for(instance_id)
            logger.info(f"Fetching details for instance: {name}")
            with remote_call("fetch", name):
                instance = session.client.get_instance(
                    request=notebooks_v2.GetInstanceRequest(name=name),
                    **self._call_kwargs(),
                )

        return InstanceDetails(
            name=instance.name or name,
            instance_id=instance_id_from_name(instance.name or name),
            state=str(instance.state.name),
            proxy_uri=instance.proxy_uri or None,
            creator=instance.creator or None,
            create_time=instance.create_time or None,
            update_time=instance.update_time or None,
        )

    def _submit(
        self,
        action: str,
        request_type: Any,
        project_id: str,
        location: str,
        instance_id: str,
    ) -> str:
        with self._session(project_id, location) as session:
            name = session.name_for(instance_id)
            logger.info(f"Submitting {action} for instance: {name}")
            with remote_call(action, name):
                operation = getattr(session.client, f"{action}_instance")(
                    request=request_type(name=name), **self._call_kwargs()
                )
            return _operation_name(operation, action, name)

    def start_instance(self, project_id: str, location: str, instance_id: str) -> str:
        return self._submit(
            "start",
            notebooks_v2.StartInstanceRequest,
            project_id,
            location,
            instance_id,
        )

    def stop_instance(self, project_id: str, location: str, instance_id: str) -> str:
        return self._submit(
            "stop",
            notebooks_v2.StopInstanceRequest,
            project_id,
            location,
            instance_id,
        )

    def delete_instance(self, project_id: str, location: str, instance_id: str) -> str:
        return self._submit(
            "delete",
            notebooks_v2.DeleteInstanceRequest,
            project_id,
            location,
            instance_id,
        )


# Function-style entry points for callers that do not keep a NotebookLifecycle


def list_instances(
    project_id: str, location: str, config: ClientConfig | None = None
) -> list[str]:
    return NotebookLifecycle(config).list_instances(project_id, location)


def create_instance(
    project_id: str,
    location: str,
    instance_id: str,
    config: ClientConfig | None = None,
    template: InstanceTemplate | None = None,
) -> str:
    return NotebookLifecycle(config).create_instance(
        project_id, location, instance_id, template
    )


def get_access_url(
    project_id: str, location: str, instance_id: str, config: ClientConfig | None = None
) -> str:
    return NotebookLifecycle(config).get_access_url(project_id, location, instance_id)


def start_instance(
    project_id: str, location: str, instance_id: str, config: ClientConfig | None = None
) -> str:
    return NotebookLifecycle(config).start_instance(project_id, location, instance_id)


def stop_instance(
    project_id: str, location: str, instance_id: str, config: ClientConfig | None = None
) -> str:
    return NotebookLifecycle(config).stop_instance(project_id, location, instance_id)


def delete_instance(
    project_id: str, location: str, instance_id: str, config: ClientConfig | None = None
) -> str:
    return NotebookLifecycle(config).delete_instance(project_id, location, instance_id)
