import os
import sys

import pytest

# Ensure project root is on sys.path for `import childcare_qa`, `import api`, etc.
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from childcare_qa.client import TransportFailure  # noqa: E402


class FakeTransport:
    """Records payloads and replays canned replies (or raises them)."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.payloads = []

    def __call__(self, payload):
        self.payloads.append(payload)
        reply = self.replies.pop(0) if self.replies else {"answer": "ok"}
        if isinstance(reply, BaseException):
            raise reply
        return reply


@pytest.fixture
def fake_transport():
    return FakeTransport


@pytest.fixture
def network_down():
    return TransportFailure("Connection refused")
