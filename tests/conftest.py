from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient

from glowpdf_api.main import app
from glowpdf_api.services.renderer import configure_renderer, reset_renderer
from glowpdf_api.services.session_store import clear_sessions
from glowpdf_api.settings import get_settings


@pytest.fixture(autouse=True)
def renderer():
    state = configure_renderer()
    yield state
    reset_renderer()


@pytest.fixture()
def client() -> TestClient:
    os.environ["GLOWPDF_ENV"] = "test"
    get_settings.cache_clear()
    clear_sessions()
    return TestClient(app)
