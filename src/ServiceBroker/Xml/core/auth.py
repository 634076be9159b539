# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Service instance authentication settings.

Document-backed operations need no authentication; the credential is kept so
that hosts can configure and retrieve it like for any other service instance.
"""

from __future__ import annotations

from typing import Optional

from azure.core.credentials import AzureNamedKeyCredential


class ServiceAuthentication:
    """
    Optional username/password pair for a service instance.

    :param credential: Named key credential holding the username (``name``) and
        password (``key``). ``None`` when the instance has no credentials.
    :type credential: ~azure.core.credentials.AzureNamedKeyCredential or None
    """

    def __init__(self, credential: Optional[AzureNamedKeyCredential] = None) -> None:
        if credential is not None and not isinstance(credential, AzureNamedKeyCredential):
            raise TypeError("credential must be an azure.core.credentials.AzureNamedKeyCredential.")
        self._credential = credential

    @classmethod
    def from_username_password(cls, username: str, password: str) -> "ServiceAuthentication":
        return cls(AzureNamedKeyCredential(username, password))

    @property
    def credential(self) -> Optional[AzureNamedKeyCredential]:
        return self._credential

    @property
    def username(self) -> Optional[str]:
        return self._credential.named_key.name if self._credential is not None else None

    @property
    def password(self) -> Optional[str]:
        return self._credential.named_key.key if self._credential is not None else None

    def update(self, username: str, password: str) -> None:
        """Rotate the stored credentials in place, or set them when absent."""
        if self._credential is None:
            self._credential = AzureNamedKeyCredential(username, password)
        else:
            self._credential.update(username, password)


__all__ = ["ServiceAuthentication"]
