from __future__ import annotations

import jwt
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import ValidationError

from account_identity.api import routes
from account_identity.domain.service import AccountService
from account_identity.errors import HashingFailure
from account_identity.memory_store import InMemoryAccountStore

from conftest import ISSUER, SECRET


def _register(client, email="a@x.com", password="secret1", **profile):
    return client.post("/v1/accounts", json={"email": email, "password": password, **profile})


def _login(client, email="a@x.com", password="secret1"):
    return client.post("/v1/auth/login", json={"email": email, "password": password})


def test_register_returns_public_view(api_client):
    client, _ = api_client
    response = _register(client, nickname="alpha", phone="010-0000-0000")

    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "a@x.com"
    assert body["state"] == "active"
    assert body["nickname"] == "alpha"
    assert "password" not in body
    assert "password_hash" not in body


def test_register_duplicate_email(api_client):
    client, service = api_client
    _register(client)
    response = _register(client, password="another1")

    assert response.status_code == 409
    assert response.json()["detail"] == "an account with this email already exists"


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "not-an-email", "password": "secret1"},
        {"email": "a@x.com", "password": "short"},
        {"email": "a@x.com"},
    ],
)
def test_register_validates_input(api_client, payload):
    client, _ = api_client
    assert client.post("/v1/accounts", json=payload).status_code == 422


def test_login_returns_bearer_token(api_client):
    client, _ = api_client
    account_id = _register(client).json()["account_id"]

    response = _login(client)
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["expires_in"] == 600
    claims = jwt.decode(body["access_token"], SECRET, algorithms=["HS256"], issuer=ISSUER)
    assert claims["sub"] == account_id


def test_login_failures_share_a_generic_message(api_client):
    client, _ = api_client
    _register(client)

    wrong_password = _login(client, password="wrong-one")
    unknown_email = _login(client, email="nobody@x.com")

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {"detail": "invalid email or password"}


def test_disable_then_login_is_forbidden(api_client):
    client, _ = api_client
    account_id = _register(client).json()["account_id"]

    response = client.post(f"/v1/accounts/{account_id}/disable", json={"password": "secret1"})
    assert response.status_code == 200
    assert response.json()["state"] == "disabled"

    again = client.post(f"/v1/accounts/{account_id}/disable", json={"password": "secret1"})
    assert again.status_code == 200
    assert again.json()["state"] == "disabled"

    login = _login(client)
    assert login.status_code == 403
    assert "disabled" in login.json()["detail"]

    record = client.get(f"/v1/accounts/{account_id}")
    assert record.status_code == 200
    assert record.json()["state"] == "disabled"


def test_disable_requires_correct_password(api_client):
    client, _ = api_client
    account_id = _register(client).json()["account_id"]

    response = client.post(f"/v1/accounts/{account_id}/disable", json={"password": "wrong-one"})
    assert response.status_code == 401
    assert _login(client).status_code == 200


def test_reauthorize(api_client):
    client, _ = api_client
    account_id = _register(client).json()["account_id"]

    ok = client.post(f"/v1/accounts/{account_id}/reauthorize", json={"password": "secret1"})
    assert ok.status_code == 204
    assert ok.content == b""

    wrong = client.post(f"/v1/accounts/{account_id}/reauthorize", json={"password": "nope"})
    assert wrong.status_code == 401

    unknown = client.post("/v1/accounts/does-not-exist/reauthorize", json={"password": "secret1"})
    assert unknown.status_code == 403
    assert unknown.json()["detail"] == "forbidden"


def test_change_password(api_client):
    client, _ = api_client
    account_id = _register(client).json()["account_id"]

    response = client.put(
        f"/v1/accounts/{account_id}/password",
        json={"current_password": "secret1", "new_password": "secret2"},
    )
    assert response.status_code == 204
    assert _login(client).status_code == 401
    assert _login(client, password="secret2").status_code == 200

    rejected = client.put(
        f"/v1/accounts/{account_id}/password",
        json={"current_password": "secret1", "new_password": "secret3"},
    )
    assert rejected.status_code == 401


def test_get_unknown_account(api_client):
    client, _ = api_client
    assert client.get("/v1/accounts/missing").status_code == 404


def test_store_outage_maps_to_service_unavailable(hasher, issuer):
    from test_flows import UnavailableStore

    app = FastAPI()
    app.include_router(routes.router)
    app.state.account_service = AccountService(UnavailableStore(), hasher, issuer)

    with TestClient(app) as client:
        response = _login(client)
    assert response.status_code == 503
    assert response.json()["detail"] == "service temporarily unavailable"


def test_register_without_profile_fields(api_client):
    client, _ = api_client
    response = _register(client)

    assert response.status_code == 201
    body = response.json()
    assert body["nickname"] is None
    assert body["phone"] is None


@pytest.mark.parametrize(
    ("model", "fields"),
    [
        (routes.RegisterRequest, {"email": "a@x.com", "password": "ab\ud800cdef"}),
        (routes.LoginRequest, {"email": "a@x.com", "password": "ab\ud800cdef"}),
        (routes.PasswordConfirmation, {"password": "ab\ud800cdef"}),
        (routes.ChangePasswordRequest, {"current_password": "secret1", "new_password": "ab\ud800cdef"}),
    ],
)
def test_request_models_reject_unencodable_passwords(model, fields):
    with pytest.raises(ValidationError):
        model(**fields)


def test_hashing_failure_maps_to_internal_error(hasher, issuer, monkeypatch):
    def broken_hash(plaintext):
        raise HashingFailure("password hash transform failed")

    monkeypatch.setattr(hasher, "hash", broken_hash)
    app = FastAPI()
    app.include_router(routes.router)
    app.state.account_service = AccountService(InMemoryAccountStore(), hasher, issuer)

    with TestClient(app) as client:
        response = _register(client)
    assert response.status_code == 500
    assert response.json()["detail"] == "internal error"
