"""The list of secrets a service imports into its secret store, and its JSON form."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Union


class SecretsValidationError(ValueError):
    """Raised when service secrets JSON is malformed or fails validation."""


@dataclass
class SecretDataKeyValue:
    key: str
    value: str


@dataclass
class ServiceSecret:
    secret_name: str
    imported: bool = False
    secret_data: list[SecretDataKeyValue] = field(default_factory=list)


@dataclass
class ServiceSecrets:
    secrets: list[ServiceSecret] = field(default_factory=list)

    def marshal_json(self) -> str:
        """Return the compact JSON form of the secrets."""
        document = {
            "secrets": [
                {
                    "secretName": secret.secret_name,
                    "imported": secret.imported,
                    "secretData": [
                        {"key": item.key, "value": item.value} for item in secret.secret_data
                    ],
                }
                for secret in self.secrets
            ]
        }
        return json.dumps(document, separators=(",", ":"), ensure_ascii=False)


def _string(entry: dict[str, Any], key: str, where: str) -> str:
    value = entry.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise SecretsValidationError(f"{where} must be a string")
    return value


def _parse_data(entry: Any, where: str, problems: list[str]) -> SecretDataKeyValue:
    if not isinstance(entry, dict):
        raise SecretsValidationError(f"{where} must be an object")
    key = _string(entry, "key", f"{where}.Key")
    value = _string(entry, "value", f"{where}.Value")
    if not key:
        problems.append(f"{where}.Key field is required")
    if not value:
        problems.append(f"{where}.Value field is required")
    return SecretDataKeyValue(key, value)


def _parse_secret(entry: Any, where: str, problems: list[str]) -> ServiceSecret:
    if not isinstance(entry, dict):
        raise SecretsValidationError(f"{where} must be an object")

    name = _string(entry, "secretName", f"{where}.SecretName")
    if not name.strip():
        problems.append(f"{where}.SecretName field should not be empty string")

    imported = entry.get("imported")
    if imported is None:
        imported = False
    elif not isinstance(imported, bool):
        raise SecretsValidationError(f"{where}.Imported must be a boolean")

    raw_data = entry.get("secretData")
    data: list[SecretDataKeyValue] = []
    if raw_data is None:
        problems.append(f"{where}.SecretData field is required")
    elif not isinstance(raw_data, list):
        raise SecretsValidationError(f"{where}.SecretData must be a list")
    else:
        data = [
            _parse_data(item, f"{where}.SecretData[{index}]", problems)
            for index, item in enumerate(raw_data)
        ]
    return ServiceSecret(name, imported, data)


def _format_errors(errors: list[str]) -> str:
    heading = "1 error occurred" if len(errors) == 1 else f"{len(errors)} errors occurred"
    points = "\n\t".join(f"* {error}" for error in errors)
    return f"{heading}:\n\t{points}\n\n"


def unmarshal_service_secrets_json(data: Union[str, bytes]) -> ServiceSecrets:
    """Parse and validate the JSON list of a service's secrets."""
    try:
        document = json.loads(data)
    except json.JSONDecodeError as err:
        raise SecretsValidationError(f"invalid JSON: {err}") from err
    if not isinstance(document, dict):
        raise SecretsValidationError("service secrets JSON must be an object")

    problems: list[str] = []
    secrets: list[ServiceSecret] = []
    raw = document.get("secrets")
    if raw is None:
        problems.append("ServiceSecrets.Secrets field is required")
    elif not isinstance(raw, list):
        raise SecretsValidationError("ServiceSecrets.Secrets must be a list")
    elif not raw:
        problems.append("ServiceSecrets.Secrets field should greater than 0")
    else:
        secrets = [
            _parse_secret(entry, f"ServiceSecrets.Secrets[{index}]", problems)
            for index, entry in enumerate(raw)
        ]

    if problems:
        raise SecretsValidationError("; ".join(problems))

    # Secret data may only be empty for secrets that were already imported.
    missing = [
        f"SecretData for '{secret.secret_name}' must not be empty when Imported=false"
        for secret in secrets
        if not secret.imported and not secret.secret_data
    ]
    if missing:
        raise SecretsValidationError(_format_errors(missing))

    return ServiceSecrets(secrets)