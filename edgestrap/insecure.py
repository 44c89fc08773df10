"""A secret provider that serves secrets from the service's own configuration."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Protocol, Union

from .instruments import Counter
from .secrets import (
    SECRETS_REQUESTED_METRIC_NAME,
    SECRETS_STORED_METRIC_NAME,
    WILDCARD_NAME,
)

_LOG = logging.getLogger(__name__)

INSECURE_SECRETS_PATH = "Writable/InsecureSecrets"

SecretCallback = Callable[[str], None]


class SecretError(Exception):
    """Raised when a secret cannot be read, stored or registered."""


@dataclass
class InsecureSecretsInfo:
    """One named group of secrets held in plain configuration."""

    secret_name: str
    secret_data: dict[str, str] = field(default_factory=dict)


InsecureSecrets = Mapping[str, InsecureSecretsInfo]
SecretsSource = Union[
    Optional[InsecureSecrets], Callable[[], Optional[InsecureSecrets]]
]


def secret_name_path(secret_name: str) -> str:
    """Configuration key that holds the name of an insecure secret."""
    return f"{INSECURE_SECRETS_PATH}/{secret_name}/SecretName"


def secret_data_path(secret_name: str, key: str) -> str:
    """Configuration key that holds one value of an insecure secret."""
    return f"{INSECURE_SECRETS_PATH}/{secret_name}/SecretData/{key}"


class _ConfigClient(Protocol):
    def put_configuration_value(self, key: str, value: bytes) -> None: ...


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InsecureProvider:
    """Serves secrets from configuration when the secret store is not in use.

    ``insecure_secrets`` is either the mapping of secrets or a callable that
    returns the current mapping, so that configuration updates are seen.
    """

    def __init__(
        self,
        insecure_secrets: SecretsSource,
        logger: Optional[logging.Logger] = None,
        config_client: Optional[_ConfigClient] = None,
        clock: Callable[[], datetime] = _now,
    ) -> None:
        self._source = insecure_secrets
        self._logger = logger if logger is not None else _LOG
        self._config_client = config_client
        self._clock = clock
        self._last_updated = clock()
        self._callbacks: dict[str, Optional[SecretCallback]] = {}
        self._secrets_requested = Counter()
        self._secrets_stored = Counter()
        self._zero_trust_requested = False

    @property
    def registered_callbacks(self) -> dict[str, Optional[SecretCallback]]:
        """A copy of the callbacks registered by secret name."""
        return dict(self._callbacks)

    @property
    def zero_trust_requested(self) -> bool:
        """Whether zero trust was asked for, though it is never enabled here."""
        return self._zero_trust_requested

    def _insecure_secrets(self, missing_message: str) -> InsecureSecrets:
        secrets = self._source() if callable(self._source) else self._source
        if secrets is None:
            raise SecretError(missing_message)
        return secrets

    def get_secret(self, secret_name: str, *keys: str) -> dict[str, str]:
        """Return the requested keys of a secret, or all of its keys if none are given."""
        self._secrets_requested.inc(1)
        secrets = self._insecure_secrets("InsecureSecrets missing from configuration")

        results: dict[str, str] = {}
        missing: list[str] = []
        found = False
        for info in secrets.values():
            if info.secret_name != secret_name:
                continue
            if not keys:
                return dict(info.secret_data)
            found = True
            for key in keys:
                if key in info.secret_data:
                    results[key] = info.secret_data[key]
                else:
                    missing.append(key)

        if missing:
            raise SecretError(f"No value for the keys: [{','.join(missing)}] exists")
        if not found:
            raise SecretError(
                f"Error, secretName ({secret_name}) doesn't exist in secret store"
            )
        return results

    def store_secret(self, secret_name: str, secrets: Mapping[str, str]) -> None:
        """Write a secret into the configuration provider.

        Update notifications happen once the configuration provider reports
        the change, so none are raised here.
        """
        client = self._config_client
        if client is None:
            raise SecretError(
                "can't store secrets. ConfigurationProvider is not in use "
                "or has not been properly initialized"
            )
        try:
            client.put_configuration_value(
                secret_name_path(secret_name), secret_name.encode()
            )
        except Exception as err:
            raise SecretError(
                "error setting secretName value in the config provider"
            ) from err

        for key, value in secrets.items():
            try:
                client.put_configuration_value(
                    secret_data_path(secret_name, key), value.encode()
                )
            except Exception as err:
                raise SecretError(
                    "error setting secretData key/value pair in the config provider"
                ) from err

    def secrets_updated(self) -> None:
        self._last_updated = self._clock()

    def secrets_last_updated(self) -> datetime:
        return self._last_updated

    def has_secret(self, secret_name: str) -> bool:
        secrets = self._insecure_secrets("InsecureSecret missing from configuration")
        return any(info.secret_name == secret_name for info in secrets.values())

    def list_secret_names(self) -> list[str]:
        secrets = self._insecure_secrets("InsecureSecrets missing from configuration")
        return [info.secret_name for info in secrets.values()]

    def register_secret_updated_callback(
        self, secret_name: str, callback: Optional[SecretCallback]
    ) -> None:
        """Register a callback for a secret, or for any secret under the wildcard name."""
        if secret_name in self._callbacks:
            raise SecretError(
                f"there is a callback already registered for secretName '{secret_name}'"
            )
        self._callbacks[secret_name] = callback

    def secret_updated_at_secret_name(self, secret_name: str) -> None:
        """Record an update and run its callback; a specific one wins over the wildcard."""
        self._secrets_stored.inc(1)
        self._last_updated = self._clock()

        if secret_name in self._callbacks:
            self._logger.debug("invoking callback registered for secretName: '%s'", secret_name)
            callback = self._callbacks[secret_name]
        elif WILDCARD_NAME in self._callbacks:
            self._logger.debug("invoking wildcard callback for secretName: '%s'", secret_name)
            callback = self._callbacks[WILDCARD_NAME]
        else:
            return
        if callback is not None:
            callback(secret_name)

    def deregister_secret_updated_callback(self, secret_name: str) -> None:
        self._callbacks.pop(secret_name, None)

    def get_metrics_to_register(self) -> dict[str, Any]:
        return {
            SECRETS_REQUESTED_METRIC_NAME: self._secrets_requested,
            SECRETS_STORED_METRIC_NAME: self._secrets_stored,
        }

    def get_self_jwt(self) -> str:
        """Without security there is no token; callers send no authorization."""
        return ""

    def is_jwt_valid(self, jwt: str) -> bool:
        """Without security every token string is accepted."""
        return isinstance(jwt, str)

    def is_zero_trust_enabled(self) -> bool:
        return False

    def enable_zero_trust(self) -> None:
        """Note the request; zero trust is never available without security."""
        self._zero_trust_requested = True
        self._logger.debug("zero trust requested, but security is disabled")