"""
Resource paths for Workbench instances.

Every name is derived from (project, location, instance_id) and is never
stored on its own:

    projects/{project}/locations/{location}/instances/{instance_id}
"""


def parent_path(project_id: str, location: str) -> str:
    """Parent used to list and create instances."""
    return f"projects/{project_id}/locations/{location}"


def instance_name(project_id: str, location: str, instance_id: str) -> str:
    return f"{parent_path(project_id, location)}/instances/{instance_id}"


def parse_instance_name(name: str) -> tuple[str, str, str]:
    """
    Splits a fully qualified instance name back into its parts.
    Raises ValueError if the name does not follow the convention.
    """
    parts = name.split("/")
    if (
        len(parts) != 6
        or parts[0] != "projects"
        or parts[2] != "locations"
        or parts[4] != "instances"
        or not all(parts[1::2])
    ):
        raise ValueError(f"Not a Workbench instance name: {name!r}")
    return parts[1], parts[3], parts[5]


def instance_id_from_name(name: str) -> str:
    # Tolerates bare ids as well as full names
    return name.split("/")[-1]
