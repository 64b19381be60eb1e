import pytest
from unittest.mock import AsyncMock
from pearch_gateway.api.schemas import Credentials
from pearch_gateway.services.credentials import StaticCredentialProvider


class FakeClock:
    """Monotonic clock that only moves when the poller sleeps."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakePearchApi:
    """Stands in for PearchTransport; answers submit and status calls from canned data."""

    def __init__(self, submit_response=None, statuses=None):
        self.submit_response = {"task_id": "task-123"} if submit_response is None else submit_response
        self.statuses = list(statuses or [])
        self.calls = []
        self.request = AsyncMock(side_effect=self._handle)

    @property
    def status_calls(self):
        return [c for c in self.calls if c[0] == "GET"]

    @property
    def submit_calls(self):
        return [c for c in self.calls if c[0] == "POST"]

    async def _handle(self, method, url, headers, body=None):
        self.calls.append((method, url, headers, body))
        if method == "POST":
            return self.submit_response
        if len(self.statuses) > 1:
            return self.statuses.pop(0)
        return self.statuses[0]


@pytest.fixture
def credentials():
    return Credentials(base_url="https://api.test.pearch.ai", api_key="test-key")


@pytest.fixture
def credential_provider():
    return StaticCredentialProvider("https://api.test.pearch.ai", "test-key")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_api():
    return FakePearchApi(statuses=[{"status": "completed", "results": []}])


@pytest.fixture
def make_api():
    """Builds a FakePearchApi with the given submit response and status sequence."""
    return FakePearchApi
