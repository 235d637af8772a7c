"""Authentication credentials value object.

Credentials describe how to authenticate against an external system. They
are immutable; refreshing produces a new instance.
"""

import base64
from datetime import UTC, datetime, timedelta
from typing import Any

from dateutil import parser as date_parser

from integration_hub.core.domain.base import ValueObject
from integration_hub.core.errors import ValidationError
from integration_hub.modules.integration.domain.enums import AuthType

REFRESH_WINDOW = timedelta(minutes=5)

_REQUIRED_KEYS: dict[AuthType, tuple[str, ...]] = {
    AuthType.API_KEY: ("api_key",),
    AuthType.OAUTH2: ("access_token",),
    AuthType.BASIC: ("username", "password"),
    AuthType.BEARER: ("token",),
    AuthType.CUSTOM: (),
}


class AuthCredentials(ValueObject):
    """Credentials for one of the supported authentication schemes.

    Use the ``create_*`` factories rather than the constructor where possible.
    """

    def __init__(
        self,
        auth_type: AuthType,
        credentials: dict[str, str],
        expires_at: datetime | None = None,
        refresh_token: str | None = None,
        scopes: list[str] | None = None,
    ):
        """Initialize credentials.

        Args:
            auth_type: Authentication scheme
            credentials: Scheme-specific secret values
            expires_at: Optional expiry instant (timezone aware)
            refresh_token: Optional OAuth2 refresh token
            scopes: Optional granted scopes

        Raises:
            ValidationError: If required values for the scheme are missing
        """
        super().__init__()
        if not isinstance(auth_type, AuthType):
            raise ValidationError("auth_type must be an AuthType")

        self.auth_type = auth_type
        self.credentials = self._validate_credentials(auth_type, credentials or {})
        self.expires_at = _aware(expires_at)
        self.refresh_token = refresh_token or None
        self.scopes = list(scopes or [])
        self._freeze()

    @staticmethod
    def _validate_credentials(
        auth_type: AuthType, credentials: dict[str, str]
    ) -> dict[str, str]:
        if auth_type == AuthType.CUSTOM and not credentials:
            raise ValidationError("Custom credentials cannot be empty")

        for key in _REQUIRED_KEYS[auth_type]:
            value = credentials.get(key)
            if not value or not str(value).strip():
                raise ValidationError(
                    f"{key} is required for {auth_type.value} credentials",
                    field=key,
                )
        return dict(credentials)

    # Factories

    @classmethod
    def create_api_key(
        cls, api_key: str, expires_at: datetime | None = None
    ) -> "AuthCredentials":
        return cls(AuthType.API_KEY, {"api_key": api_key}, expires_at=expires_at)

    @classmethod
    def create_oauth2(
        cls,
        access_token: str,
        refresh_token: str | None = None,
        expires_at: datetime | None = None,
        scopes: list[str] | None = None,
    ) -> "AuthCredentials":
        return cls(
            AuthType.OAUTH2,
            {"access_token": access_token},
            expires_at=expires_at,
            refresh_token=refresh_token,
            scopes=scopes,
        )

    @classmethod
    def create_basic(cls, username: str, password: str) -> "AuthCredentials":
        return cls(AuthType.BASIC, {"username": username, "password": password})

    @classmethod
    def create_bearer(
        cls, token: str, expires_at: datetime | None = None
    ) -> "AuthCredentials":
        return cls(AuthType.BEARER, {"token": token}, expires_at=expires_at)

    @classmethod
    def create_custom(
        cls, credentials: dict[str, str], expires_at: datetime | None = None
    ) -> "AuthCredentials":
        return cls(AuthType.CUSTOM, credentials, expires_at=expires_at)

    # Expiry

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at <= (now or datetime.now(UTC))

    def is_refreshable(self) -> bool:
        return self.auth_type == AuthType.OAUTH2 and bool(self.refresh_token)

    def needs_refresh(self, now: datetime | None = None) -> bool:
        """Refreshable credentials that expire within the next five minutes."""
        if not self.is_refreshable() or self.expires_at is None:
            return False
        return self.expires_at - (now or datetime.now(UTC)) < REFRESH_WINDOW

    def time_until_expiry(self, now: datetime | None = None) -> timedelta | None:
        if self.expires_at is None:
            return None
        return self.expires_at - (now or datetime.now(UTC))

    def refresh_with(
        self,
        access_token: str,
        expires_at: datetime | None = None,
        refresh_token: str | None = None,
    ) -> "AuthCredentials":
        """Return new OAuth2 credentials carrying a freshly issued token.

        Raises:
            ValidationError: If these credentials cannot be refreshed
        """
        if not self.is_refreshable():
            raise ValidationError(
                f"{self.auth_type.value} credentials cannot be refreshed"
            )
        return AuthCredentials.create_oauth2(
            access_token=access_token,
            refresh_token=refresh_token or self.refresh_token,
            expires_at=expires_at,
            scopes=self.scopes,
        )

    # Headers

    def to_auth_header(self) -> dict[str, str]:
        """Headers that authenticate a request with these credentials."""
        if self.auth_type == AuthType.API_KEY:
            return {"X-API-Key": self.credentials["api_key"]}
        if self.auth_type == AuthType.OAUTH2:
            return {"Authorization": f"Bearer {self.credentials['access_token']}"}
        if self.auth_type == AuthType.BEARER:
            return {"Authorization": f"Bearer {self.credentials['token']}"}
        if self.auth_type == AuthType.BASIC:
            raw = f"{self.credentials['username']}:{self.credentials['password']}"
            encoded = base64.b64encode(raw.encode("utf-8")).decode("ascii")
            return {"Authorization": f"Basic {encoded}"}
        return {key: str(value) for key, value in self.credentials.items()}

    # Serialization

    def to_dict(self, include_secrets: bool = False) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.auth_type.value,
            "expiresAt": self.expires_at.isoformat() if self.expires_at else None,
            "scopes": list(self.scopes),
            "isRefreshable": self.is_refreshable(),
        }
        if include_secrets:
            data["credentials"] = dict(self.credentials)
            data["refreshToken"] = self.refresh_token
        else:
            data["credentialKeys"] = sorted(self.credentials)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AuthCredentials":
        expires_at = data.get("expiresAt") or data.get("expires_at")
        if isinstance(expires_at, str):
            expires_at = date_parser.isoparse(expires_at)
        return cls(
            auth_type=AuthType(data["type"]),
            credentials=data.get("credentials") or {},
            expires_at=expires_at,
            refresh_token=data.get("refreshToken") or data.get("refresh_token"),
            scopes=data.get("scopes"),
        )

    def __repr__(self) -> str:
        return (
            f"AuthCredentials(type={self.auth_type.value}, "
            f"expires_at={self.expires_at!r})"
        )

    def __str__(self) -> str:
        return f"{self.auth_type.value} credentials"


def _aware(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if not isinstance(value, datetime):
        raise ValidationError("expires_at must be a datetime")
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
