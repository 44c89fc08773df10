import pytest

from edgestrap.secrets import ENV_SECRET_STORE, add_secret_name_prefix, is_security_enabled


def test_security_enabled_when_unset(monkeypatch):
    monkeypatch.delenv(ENV_SECRET_STORE, raising=False)
    assert is_security_enabled() is True


def test_security_disabled_only_for_false(monkeypatch):
    monkeypatch.setenv(ENV_SECRET_STORE, "false")
    assert is_security_enabled() is False


@pytest.mark.parametrize("value", ["true", "False", "FALSE", "", "0", "no"])
def test_other_values_mean_security_enabled(monkeypatch, value):
    monkeypatch.setenv(ENV_SECRET_STORE, value)
    assert is_security_enabled() is True


def test_env_variable_name(monkeypatch):
    monkeypatch.setenv("EDGEX_SECURITY_SECRET_STORE", "false")
    assert is_security_enabled() is False
    monkeypatch.setenv("EDGEX_SECURITY_SECRET_STORE", "true")
    assert is_security_enabled() is True


@pytest.mark.parametrize("name", ["", "   ", "\t\n"])
def test_blank_secret_name_has_no_prefix(name):
    assert add_secret_name_prefix(name) == ""


def test_secret_name_prefix():
    assert add_secret_name_prefix("core-data") == "/v1/secret/edgex/core-data"


def test_secret_name_is_trimmed():
    assert add_secret_name_prefix("  core-data  ") == add_secret_name_prefix("core-data")


@pytest.mark.parametrize("name", ["my-service", "app-rules-engine", "a"])
def test_prefixed_path_ends_with_name(name):
    result = add_secret_name_prefix(name)
    assert result.startswith("/v1/secret/edgex/")
    assert result.endswith("/" + name)


def test_path_is_cleaned():
    assert add_secret_name_prefix("/core-data") == add_secret_name_prefix("core-data")
    assert add_secret_name_prefix("nested//name/") == add_secret_name_prefix("nested/name")