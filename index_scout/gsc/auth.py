# File: index_scout/gsc/auth.py
"""index_scout.gsc.auth: Access tokens from a Google service-account key file."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Sequence, Union

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request as GARequest
from google.oauth2 import service_account

from index_scout.errors import ConfigError
from index_scout.logger import logger

__all__ = ["SCOPES", "TokenProvider"]

SCOPES: Sequence[str] = (
    "https://www.googleapis.com/auth/webmasters.readonly",
    "https://www.googleapis.com/auth/indexing",
)


class TokenProvider:
    """Loads service-account credentials and exchanges them for a bearer token."""

    def __init__(self, scopes: Sequence[str] = SCOPES) -> None:
        self.scopes = list(scopes)

    def _load(self, credentials_path: Path) -> service_account.Credentials:
        if not credentials_path.is_file():
            raise ConfigError(
                f"{credentials_path} not found, create a service account key and pass it with --credentials"
            )
        try:
            return service_account.Credentials.from_service_account_file(
                str(credentials_path), scopes=self.scopes
            )
        except (ValueError, KeyError) as exc:
            raise ConfigError(f"Invalid service account file {credentials_path}: {exc}") from exc

    def _authorize(self, credentials_path: Path) -> str:
        credentials = self._load(credentials_path)
        try:
            credentials.refresh(GARequest())
        except GoogleAuthError as exc:
            raise ConfigError(f"Could not authorize with {credentials_path}: {exc}") from exc
        logger.debug("Obtained access token for %s", credentials.service_account_email)
        return credentials.token

    async def get_access_token(self, credentials_path: Union[str, Path]) -> str:
        # the google-auth refresh is blocking
        return await asyncio.to_thread(self._authorize, Path(credentials_path))
