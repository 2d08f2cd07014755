from unittest.mock import Mock, patch

import pytest

from patient_alerts.config import Settings


@pytest.fixture
def settings() -> Settings:
    """Settings pointing at a fake server, ignoring any local .env file."""
    return Settings(api_key="test-key", base_url="http://test-server/api", _env_file=None)


@pytest.fixture
def no_sleep():
    """Replace the backoff sleep so retry tests run instantly."""
    with patch("patient_alerts.retry.time.sleep") as sleep:
        yield sleep


def fake_response(status_code=200, body=None, text=""):
    """Mock of requests.Response; ``body`` may be an exception to raise from .json()."""
    response = Mock(status_code=status_code, text=text)
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response
