from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..core import (
    DEFAULT_IMAGE_REPOSITORY,
    DEFAULT_IMAGE_TAG,
    DEFAULT_MACHINE_TYPE,
    DEFAULT_NETWORK,
    DEFAULT_PUBLIC_IP_ENABLED,
)


class InstanceTemplate(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    machine_type: str = Field(
        default=DEFAULT_MACHINE_TYPE, description="e.g., e2-standard-4"
    )
    image_repository: str = DEFAULT_IMAGE_REPOSITORY
    image_tag: str = DEFAULT_IMAGE_TAG
    public_ip_enabled: bool = DEFAULT_PUBLIC_IP_ENABLED
    network: str = Field(
        default=DEFAULT_NETWORK, description="e.g., global/networks/default"
    )

    @property
    def image(self) -> str:
        return f"{self.image_repository}:{self.image_tag}"


class InstanceDetails(BaseModel):
    name: str = Field(description="Fully qualified resource name")
    instance_id: str
    state: str
    proxy_uri: str | None = None
    creator: str | None = None
    create_time: datetime | None = None
    update_time: datetime | None = None


class OperationStatus(BaseModel):
    name: str
    done: bool
    error_code: int | None = None
    error_message: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.done and self.error_code is None
