import pytest

from edgestrap.insecure import InsecureProvider
from edgestrap.jwtauth import JWTSecretProvider


class FixedJWT:
    def __init__(self, jwt):
        self.jwt = jwt

    def get_self_jwt(self):
        return self.jwt


class FailingJWT:
    def get_self_jwt(self):
        raise RuntimeError("could not load token")


def test_adds_bearer_header():
    headers = {}
    JWTSecretProvider(FixedJWT("token")).add_authentication_data(headers)
    assert headers == {"Authorization": "Bearer token"}


def test_keeps_other_headers():
    headers = {"Accept": "application/json"}
    JWTSecretProvider(FixedJWT("token")).add_authentication_data(headers)
    assert headers["Accept"] == "application/json"
    assert headers["Authorization"].endswith("token")


def test_empty_token_adds_nothing():
    headers = {}
    JWTSecretProvider(FixedJWT("")).add_authentication_data(headers)
    assert headers == {}


def test_no_provider_adds_nothing():
    headers = {"Accept": "text/plain"}
    JWTSecretProvider(None).add_authentication_data(headers)
    assert headers == {"Accept": "text/plain"}


def test_insecure_provider_adds_nothing():
    headers = {}
    JWTSecretProvider(InsecureProvider(None)).add_authentication_data(headers)
    assert "Authorization" not in headers


def test_provider_error_propagates():
    headers = {}
    with pytest.raises(RuntimeError, match="could not load token"):
        JWTSecretProvider(FailingJWT()).add_authentication_data(headers)
    assert headers == {}