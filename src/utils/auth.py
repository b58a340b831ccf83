"""Authentication helpers for the Cloud Resource Manager API."""

from __future__ import annotations

import os
from typing import Any, Iterable

from google.auth import default as google_auth_default
from google.auth import exceptions as google_auth_exceptions
from google.oauth2 import service_account
from google_auth_oauthlib.flow import InstalledAppFlow

from utils.errors import CredentialError

SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]
AUTH_METHODS = ("service", "user", "adc")


def get_credentials(
    auth_method: str,
    credentials_path: str | None,
    scopes: Iterable[str] = SCOPES,
):
    """
    Return Google credentials using service account, OAuth user, or ADC.

    Parameters
    ----------
    auth_method:
        One of "service", "user", or "adc".
    credentials_path:
        Location of the JSON key / client secrets file when required. Ignored for ADC.
    scopes:
        Iterable of OAuth scopes to request.

    Raises
    ------
    CredentialError
        The file is missing, unreadable, or not a valid key / client secrets file.
    """
    scopes_list = list(scopes)

    if auth_method == "adc":
        try:
            credentials, _ = google_auth_default(scopes=scopes_list)
        except google_auth_exceptions.DefaultCredentialsError as exc:
            raise CredentialError(f"Application Default Credentials unavailable: {exc}") from exc
        return credentials

    if auth_method == "service":
        _ensure_credentials_file(credentials_path)
        try:
            return service_account.Credentials.from_service_account_file(
                credentials_path,
                scopes=scopes_list,
            )
        except (OSError, ValueError) as exc:
            raise CredentialError(
                f"Failed to load credentials from file {credentials_path}: {exc}",
            ) from exc

    if auth_method == "user":
        _ensure_credentials_file(credentials_path)
        try:
            flow = InstalledAppFlow.from_client_secrets_file(credentials_path, scopes_list)
        except (OSError, ValueError) as exc:
            raise CredentialError(
                f"Failed to load client secrets from file {credentials_path}: {exc}",
            ) from exc
        return flow.run_local_server(port=0)

    raise ValueError("auth must be 'service', 'user', or 'adc'")


def project_id_from_credentials(credentials: Any) -> str | None:
    """Return the project of service-account credentials, else None."""
    if isinstance(credentials, service_account.Credentials):
        return credentials.project_id
    return None


def _ensure_credentials_file(path: str | None) -> None:
    if not path or not os.path.exists(path):
        raise CredentialError(
            f"Credentials file not found: {path or '<none>'}",
        )
