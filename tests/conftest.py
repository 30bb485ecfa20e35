from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

APPLICATION_ID = "aaaaaaaa-bbbb-cccc-dddd-0123456789ab"
PHONE_NUMBER = "815012345678"
SERVICE_API_KEY = "test-service-key"


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def pkcs8_pem(rsa_key) -> str:
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture(scope="session")
def pkcs1_pem(rsa_key) -> str:
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture(scope="session")
def public_key(rsa_key):
    return rsa_key.public_key()


@pytest.fixture()
def credentials(rsa_key):
    from auth.credentials import Credentials

    return Credentials(
        application_id=APPLICATION_ID,
        private_key=rsa_key,
        api_key="api-key",
        api_secret="api-secret",
        phone_number=PHONE_NUMBER,
    )


@pytest.fixture(scope="session")
def app(pkcs8_pem: str):
    # Must be set before the settings and credential caches are populated.
    os.environ["VONAGE_APPLICATION_ID"] = APPLICATION_ID
    os.environ["VONAGE_PRIVATE_KEY"] = pkcs8_pem.replace("\n", "\\n")
    os.environ["VONAGE_PHONE_NUMBER"] = PHONE_NUMBER
    os.environ["PUBLIC_BASE_URL"] = "https://gateway.example.test/"
    os.environ["SERVICE_API_KEY"] = SERVICE_API_KEY

    import importlib

    from auth.credentials import get_credentials
    from config.settings import get_settings

    get_settings.cache_clear()
    get_credentials.cache_clear()

    # Ensure clean import with the test settings.
    for module_name in [
        "api.dependencies",
        "api.messages_routes",
        "api.voice_routes",
        "api.video_routes",
        "api.routes",
        "main",
    ]:
        sys.modules.pop(module_name, None)

    main = importlib.import_module("main")
    return main.app


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
