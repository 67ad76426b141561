"""Shared fixtures for firebase_token tests."""

import json

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

TOKEN_URI = "https://oauth2.googleapis.com/token"
FCM_SCOPE = "https://www.googleapis.com/auth/firebase.messaging"


@pytest.fixture(scope="session")
def rsa_key():
    """Throwaway RSA key for signing assertions."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_pem(rsa_key) -> str:
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


@pytest.fixture(scope="session")
def public_pem(rsa_key) -> str:
    return rsa_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()


@pytest.fixture
def service_account_data(private_pem) -> dict:
    """A complete service account key file."""
    return {
        "type": "service_account",
        "project_id": "demo-project",
        "private_key_id": "0123456789abcdef",
        "private_key": private_pem,
        "client_email": "firebase-adminsdk@demo-project.iam.gserviceaccount.com",
        "client_id": "123456789012345678901",
        "auth_uri": "https://accounts.google.com/o/oauth2/auth",
        "token_uri": TOKEN_URI,
        "auth_provider_x509_cert_url": "https://www.googleapis.com/oauth2/v1/certs",
        "universe_domain": "googleapis.com",
    }


@pytest.fixture
def service_account_file(tmp_path, service_account_data):
    path = tmp_path / "service-account.json"
    path.write_text(json.dumps(service_account_data), encoding="utf-8")
    return path


class FakeResponse:
    """Stands in for google.auth.transport.Response."""

    def __init__(self, status: int, payload):
        self.status = status
        self.headers = {"content-type": "application/json"}
        self.data = payload if isinstance(payload, bytes) else json.dumps(payload).encode()


class FakeTokenEndpoint:
    """google-auth transport request answering token requests from a queue."""

    def __init__(self):
        self.responses = []
        self.calls = []

    def respond(self, status: int, payload) -> None:
        self.responses.append(FakeResponse(status, payload))

    def fail(self, exc: Exception) -> None:
        self.responses.append(exc)

    def __call__(self, url, method="GET", body=None, headers=None, timeout=None, **kwargs):
        self.calls.append({"url": url, "method": method, "body": body, "headers": headers})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def called(self) -> bool:
        return bool(self.calls)


@pytest.fixture
def token_endpoint() -> FakeTokenEndpoint:
    return FakeTokenEndpoint()
