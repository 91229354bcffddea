# shared fixtures, tests never hit the network

import json
from pathlib import Path
from unittest.mock import MagicMock
import pytest
from weatherwidget.client import WeatherAPIClient
from weatherwidget.config import Settings

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture
def payload():
    # fresh copy per test so cases can mutate it
    return json.loads((DATA_DIR / "forecast_paris.json").read_text())


@pytest.fixture
def settings():
    return Settings(api_key="test-key", base_url="https://weather.test/v1")


def make_response(status_code=200, body=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    if isinstance(body, Exception):
        resp.json.side_effect = body
    else:
        resp.json.return_value = body
    return resp


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(settings, session):
    c = WeatherAPIClient(settings)
    # swap the thread-local session factory for a mock
    c._session = lambda: session
    return c
