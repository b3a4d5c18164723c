import json
from typing import Any

import google.auth
from google.auth import exceptions as auth_exceptions
from google.oauth2 import service_account

from .core import CLOUD_PLATFORM_SCOPE
from .errors import CredentialError
from .logger import logger


def _read_key_file(path: str) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            info = json.load(f)
    except FileNotFoundError as e:
        raise CredentialError(f"Credentials file not found: {path}") from e
    except OSError as e:
        raise CredentialError(f"Cannot read credentials file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise CredentialError(f"Credentials file {path} is not valid JSON: {e}") from e

    if not isinstance(info, dict):
        raise CredentialError(f"Credentials file {path} does not hold a JSON object")
    return info


def load_credentials(path: str | None) -> Any:
    """
    Loads the service identity used to talk to the Notebooks API.

    With a path, the file must be a service account key. Without one,
    Application Default Credentials are used. Any failure raises
    CredentialError before a client is ever built.
    """
    if path is None:
        try:
            credentials, _ = google.auth.default(scopes=[CLOUD_PLATFORM_SCOPE])
        except auth_exceptions.DefaultCredentialsError as e:
            raise CredentialError(f"No application default credentials: {e}") from e
        logger.debug("Using application default credentials")
        return credentials

    info = _read_key_file(path)
    try:
        credentials = service_account.Credentials.from_service_account_info(
            info, scopes=[CLOUD_PLATFORM_SCOPE]
        )
    except (ValueError, KeyError) as e:
        raise CredentialError(f"Malformed service account key in {path}: {e}") from e

    logger.debug(f"Using credentials from file: {path}")
    return credentials
