"""
Credential Refresher Interface

Port for exchanging a refresh token with the provider that issued it.
"""

from abc import ABC, abstractmethod

from integration_hub.modules.integration.domain.value_objects import AuthCredentials


class ICredentialRefresher(ABC):
    """Port for credential refresh."""

    @abstractmethod
    async def refresh(self, credentials: AuthCredentials) -> AuthCredentials:
        """
        Obtain fresh credentials.

        Args:
            credentials: Current credentials carrying a refresh token

        Returns:
            Replacement credentials

        Raises:
            CredentialsNotRefreshableError: If the provider rejects the refresh
        """
        ...
