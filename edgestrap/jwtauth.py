"""Adds the service's own JWT to outgoing request headers."""

from __future__ import annotations

from typing import MutableMapping, Optional, Protocol


class _JWTSource(Protocol):
    def get_self_jwt(self) -> str: ...


class JWTSecretProvider:
    """Authenticates requests with the JWT from a secret provider."""

    def __init__(self, secret_provider: Optional[_JWTSource]) -> None:
        self.secret_provider = secret_provider

    def add_authentication_data(self, headers: MutableMapping[str, str]) -> None:
        """Set a bearer Authorization header when the provider yields a token.

        Without a secret provider the headers are left as they are.
        """
        if self.secret_provider is None:
            return
        jwt = self.secret_provider.get_self_jwt()
        if jwt:
            headers["Authorization"] = f"Bearer {jwt}"