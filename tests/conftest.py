from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from account_identity.api import routes
from account_identity.domain.contracts import RegisterAccountInput
from account_identity.domain.service import AccountService
from account_identity.memory_store import InMemoryAccountStore
from account_identity.security.passwords import CredentialHasher, VerificationOutcome
from account_identity.security.tokens import TokenIssuer

SECRET = "test-signing-key-0123456789abcdef0123456789abcdef"
ISSUER = "account-identity-tests"


class SpyHasher(CredentialHasher):
    """Cheap hasher that records every hash and verification call."""

    def __init__(self) -> None:
        super().__init__(time_cost=1, memory_cost=8, parallelism=1)
        self.hash_calls = 0
        self.verify_calls: list[str | None] = []

    def hash(self, plaintext: str) -> str:
        self.hash_calls += 1
        return super().hash(plaintext)

    def outcome(self, plaintext: str, password_hash: str | None) -> VerificationOutcome:
        self.verify_calls.append(password_hash)
        return super().outcome(plaintext, password_hash)


@pytest.fixture
def store() -> InMemoryAccountStore:
    return InMemoryAccountStore()


@pytest.fixture
def hasher() -> SpyHasher:
    return SpyHasher()


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(secret=SECRET, issuer=ISSUER, ttl_seconds=600)


@pytest.fixture
def service(store, hasher, issuer) -> AccountService:
    return AccountService(store, hasher, issuer)


@pytest.fixture
def registered(service):
    """An active account registered as a@x.com / secret1."""
    return service.register(
        RegisterAccountInput(email="a@x.com", password="secret1", nickname="alpha")
    )


@pytest.fixture
def api_client(service):
    """Provide a FastAPI test client with isolated state."""
    app = FastAPI()
    app.include_router(routes.router)
    app.state.account_service = service

    with TestClient(app) as client:
        yield client, service
