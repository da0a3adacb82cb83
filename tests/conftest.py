from __future__ import annotations

from typing import Dict, Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from kotoba.config import Credentials, Settings
from kotoba.dispatch import get_providers
from kotoba.main import create_app
from tests.utils import PASSWORD, USERNAME, FakeRegistry, basic_auth_header


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        credentials=Credentials(username=USERNAME, password=PASSWORD),
        base_url="http://testserver",
        openai_key="sk-test-openai",
        cf_account_id="acct",
        cf_api_token="cf-token",
        stream_char_delay_ms=0,
        log_metrics=True,
        metrics_jl_path=str(tmp_path / "metrics.jl"),
    )


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def app(settings: Settings, registry: FakeRegistry) -> Generator[FastAPI, None, None]:
    application = create_app(settings)
    application.dependency_overrides[get_providers] = lambda: registry
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth() -> Dict[str, str]:
    return basic_auth_header(USERNAME, PASSWORD)
