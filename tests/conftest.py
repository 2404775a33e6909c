"""Shared fixtures.

Every test gets its own SQLite file and a moto-mocked S3 bucket, so nothing
leaks between tests and no AWS credentials are needed.
"""
from __future__ import annotations

from contextlib import ExitStack

import pytest
from fastapi.testclient import TestClient
from moto import mock_aws

from filedrop.core.config import Settings
from filedrop.main import create_app

BUCKET = "filedrop-test"


@pytest.fixture
def aws():
    with mock_aws():
        yield


@pytest.fixture
def make_settings(tmp_path):
    counter = {"n": 0}

    def _make(**overrides) -> Settings:
        counter["n"] += 1
        values = dict(
            database_url=f"sqlite:///{tmp_path}/filedrop-{counter['n']}.db",
            jwt_secret="test-secret",
            password_hash_method="pbkdf2:sha256:1000",
            aws_access_key_id="testing",
            aws_secret_access_key="testing",
            aws_region="us-east-1",
            aws_s3_bucket_name=BUCKET,
            create_bucket=True,
        )
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def make_client(aws, make_settings):
    with ExitStack() as stack:

        def _make(**overrides) -> TestClient:
            app = create_app(make_settings(**overrides))
            return stack.enter_context(TestClient(app))

        yield _make


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def settings(client) -> Settings:
    return client.app.state.settings


@pytest.fixture
def store(client):
    return client.app.state.blob_store


@pytest.fixture
def db(client):
    session = client.app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def register(client):
    def _register(name="Alice", email="alice@x.com", password="pw1", **extra):
        body = {"name": name, "email": email, "password": password, **extra}
        return client.post("/register", json=body)

    return _register


@pytest.fixture
def alice_token(register) -> str:
    resp = register()
    assert resp.status_code == 201
    return resp.json()["token"]


def blob_keys(store) -> list[str]:
    resp = store.client.list_objects_v2(Bucket=store.bucket)
    return [obj["Key"] for obj in resp.get("Contents", [])]
