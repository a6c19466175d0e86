import json

import httpx
import pytest

from lanshare.capability import Capability
from lanshare.models import Record


def make_values(**overrides):
    values = {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "phone": "555-0100",
        "address": "12 St James's Square",
        "gender": "Female",
        "age": 36,
    }
    values.update(overrides)
    return values


@pytest.fixture
def record_a():
    return Record(**make_values())


@pytest.fixture
def record_b():
    return Record(**make_values(name="Charles Babbage", email="cb@example.com", gender="Male", age=79))


@pytest.fixture
def shared_file(tmp_path):
    path = tmp_path / "shared.json"
    path.write_text("[]", encoding="utf-8")
    return path


@pytest.fixture
def capability(shared_file):
    cap = Capability(shared_file)
    yield cap
    cap.release()


def read_json(path):
    return json.loads(path.read_text(encoding="utf-8"))


class RelayRecorder:
    """Collects requests sent to a MockTransport and answers with `status`."""

    def __init__(self, status=200, exc=None):
        self.status = status
        self.exc = exc
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        return httpx.Response(self.status, json={"ok": self.status < 400})

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))


@pytest.fixture
def relay_ok():
    return RelayRecorder()
