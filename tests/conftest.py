import sys
from pathlib import Path

import pytest

# Ensure repository root is on sys.path so `import burner_sync` works locally
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

_NO_JSON = object()


class FakeResponse:
    def __init__(self, status_code=200, payload=_NO_JSON, reason="OK", text=""):
        self.status_code = status_code
        self.reason = reason
        self.text = text
        self._payload = payload

    def json(self):
        if self._payload is _NO_JSON:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """Stands in for requests.Session; records every POST."""

    def __init__(self, response=None, exc=None):
        self.response = response or FakeResponse(
            payload={"success": True, "data": {"ramUsage": 1.75}}
        )
        self.exc = exc
        self.calls = []
        self.closed = False

    def post(self, url, data=None, headers=None, timeout=None):
        self.calls.append({"url": url, "data": data, "headers": headers, "timeout": timeout})
        if self.exc is not None:
            raise self.exc
        return self.response

    def close(self):
        self.closed = True


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def home(tmp_path):
    folder = tmp_path / "home"
    folder.mkdir()
    return folder
