from pydantic import BaseModel, ConfigDict, Field

from ..core import DEFAULT_TIMEOUT


class ClientConfig(BaseModel):
    """Connection settings handed to the client factory for every session."""

    model_config = ConfigDict(frozen=True)

    credentials_path: str | None = Field(
        default=None,
        description="Service account key file. None uses Application Default Credentials.",
    )
    api_endpoint: str | None = Field(
        default=None, description="Override for notebooks.googleapis.com"
    )
    timeout: float | None = Field(
        default=DEFAULT_TIMEOUT, description="Per-call deadline in seconds"
    )
