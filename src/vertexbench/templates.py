from typing import Any

from google.cloud import notebooks_v2
from pydantic import ValidationError

from .schemas.notebook import InstanceTemplate

# Baseline used for every create request unless the caller overrides it
DEFAULT_TEMPLATE = InstanceTemplate()


def build_template(**overrides: Any) -> InstanceTemplate:
    """
    Returns the default template with the named options replaced.
    Accepted options: machine_type, image_repository, image_tag,
    public_ip_enabled, network.
    """
    if not overrides:
        return DEFAULT_TEMPLATE
    try:
        return InstanceTemplate(**{**DEFAULT_TEMPLATE.model_dump(), **overrides})
    except ValidationError as e:
        raise ValueError(f"Invalid instance template: {e}") from e


def to_instance(template: InstanceTemplate) -> notebooks_v2.Instance:
    """Maps a template onto the Instance message submitted at creation."""
    gce_setup = notebooks_v2.GceSetup(
        machine_type=template.machine_type,
        container_image=notebooks_v2.ContainerImage(
            repository=template.image_repository,
            tag=template.image_tag,
        ),
        network_interfaces=[notebooks_v2.NetworkInterface(network=template.network)],
        disable_public_ip=not template.public_ip_enabled,
    )
    return notebooks_v2.Instance(gce_setup=gce_setup)
