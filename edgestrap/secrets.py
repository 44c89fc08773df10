"""Secret store settings: security mode detection and secret name paths."""

from __future__ import annotations

import os
import posixpath

ENV_SECRET_STORE = "EDGEX_SECURITY_SECRET_STORE"
USERNAME_KEY = "username"
PASSWORD_KEY = "password"
# A secret name under which a callback receives updates to any secret.
WILDCARD_NAME = "*"

SECRETS_REQUESTED_METRIC_NAME = "SecuritySecretsRequested"
SECRETS_STORED_METRIC_NAME = "SecuritySecretsStored"
SECURITY_RUNTIME_SECRET_TOKEN_DURATION_NAME = "SecurityRuntimeSecretTokenDuration"
SECURITY_GET_SECRET_DURATION_NAME = "SecurityGetSecretDuration"


def is_security_enabled() -> bool:
    """Security is on unless the secret store variable is exactly 'false'."""
    return os.environ.get(ENV_SECRET_STORE) != "false"


def add_secret_name_prefix(secret_name: str) -> str:
    """Return the store path for ``secret_name``, or '' if it is blank."""
    trimmed = secret_name.strip()
    if not trimmed:
        return ""
    return "/" + posixpath.normpath("/".join(("v1", "secret", "edgex", trimmed)))