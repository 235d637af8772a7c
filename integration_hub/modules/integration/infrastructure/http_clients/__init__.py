"""Outbound HTTP clients."""

from .oauth import OAuth2CredentialRefresher
from .rest_api import HttpxTransport

__all__ = ["HttpxTransport", "OAuth2CredentialRefresher"]
