import pytest
from fastapi.testclient import TestClient

from api import server
from childcare_qa.client import TransportFailure
from childcare_qa.config import Settings
from childcare_qa.conversation import ConversationService


class DummyCostClient:
    def __init__(self, status, body):
        self.status = status
        self.body = body

    def cost(self, payload):
        return self.status, self.body


@pytest.fixture
def transport(fake_transport):
    return fake_transport()


@pytest.fixture
def client(transport):
    server.app.dependency_overrides[server.get_conversation_service] = lambda: ConversationService(
        transport=transport
    )
    yield TestClient(server.app)
    server.app.dependency_overrides.clear()
    server.SESSIONS.clear()


def _new_session(client):
    res = client.post("/sessions")
    assert res.status_code == 201
    return res.json()["session_id"]


def test_health(client):
    assert client.get("/health").json()["ok"] is True


def test_send_appends_user_and_assistant(client, transport):
    transport.replies.append(
        {"answer": "Found one.", "providers": [{"name": "Little Steps", "city": "Pittsburgh", "zip": None}]}
    )
    sid = _new_session(client)
    res = client.post(f"/sessions/{sid}/send", json={"query": "centers in Pittsburgh", "intent": "LOOKUP_PROVIDER"})
    assert res.status_code == 200
    msgs = res.json()["messages"]
    assert [m["role"] for m in msgs] == ["user", "assistant"]
    assert msgs[1]["providers"][0]["display_address"] == "Pittsburgh"
    assert transport.payloads[0] == {"query": "centers in Pittsburgh", "state": "PA", "intent": "LOOKUP_PROVIDER"}

    view = client.get(f"/sessions/{sid}").json()
    assert len(view["messages"]) == 2


def test_cost_send_accepts_wire_aliases(client, transport):
    transport.replies.append({"intent": "COST", "data": {"state": "PA", "county": "Allegheny", "answers": []}})
    sid = _new_session(client)
    res = client.post(
        f"/sessions/{sid}/send",
        json={"intent": "COST", "state": "pa", "countyFips": "42003", "units": "monthly"},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["messages"][0]["content"] == "Cost estimate"
    assert body["messages"][1]["cost"]["header"].startswith("County: Allegheny")
    assert transport.payloads[0]["countyFips"] == "42003"
    assert transport.payloads[0]["units"] == "monthly"


def test_empty_query_refused_with_envelope(client, transport):
    sid = _new_session(client)
    res = client.post(f"/sessions/{sid}/send", json={"query": "", "intent": "LOOKUP_RULE"})
    assert res.status_code == 400
    assert res.json()["code"] == "400"
    assert transport.payloads == []
    assert client.get(f"/sessions/{sid}").json()["messages"] == []


def test_network_failure_is_a_message(client, transport):
    transport.replies.append(TransportFailure("Connection refused"))
    sid = _new_session(client)
    res = client.post(f"/sessions/{sid}/send", json={"query": "hi"})
    assert res.status_code == 200
    assert res.json()["messages"][1]["content"] == "Network error: Connection refused"


def test_unknown_session(client):
    res = client.post("/sessions/nope/send", json={"query": "hi"})
    assert res.status_code == 404


def test_cost_estimate_endpoint(client):
    body = {
        "ok": True,
        "message": "About $1,345/month",
        "result": {
            "primary_value": 1345,
            "rows": [
                {"county": "Allegheny", "metric_values": {"median": 1345, "p75": 1500}, "units": "monthly"},
                {"metric_values": {"median": 1100, "p75": 1250}, "units": "monthly"},
            ],
        },
    }
    server.app.dependency_overrides[server.get_api_client] = lambda: DummyCostClient(200, body)
    res = client.post("/cost/estimate", json={"county": "Allegheny"})
    assert res.status_code == 200
    data = res.json()
    assert data["primary_value"] == 1345
    assert data["rows"][1] == ["State Avg", "1100", "1250", "monthly"]


def test_cost_estimate_backend_failure(client):
    server.app.dependency_overrides[server.get_api_client] = lambda: DummyCostClient(200, {"ok": False})
    res = client.post("/cost/estimate", json={})
    assert res.status_code == 502
    assert res.json()["message"] == "Request failed"


def test_cost_estimate_invalid_choice(client):
    server.app.dependency_overrides[server.get_api_client] = lambda: DummyCostClient(200, {})
    res = client.post("/cost/estimate", json={"setting": "nanny"})
    assert res.status_code == 400


def test_delete_session(client):
    sid = _new_session(client)
    assert client.delete(f"/sessions/{sid}").status_code == 204
    assert client.get(f"/sessions/{sid}").status_code == 404
    assert client.delete(f"/sessions/{sid}").status_code == 404


def test_oldest_sessions_evicted_past_limit(client):
    server.app.dependency_overrides[server.get_settings] = lambda: Settings(MAX_SESSIONS=2)
    first = _new_session(client)
    second = _new_session(client)
    # touching `first` makes `second` the least recently used
    assert client.get(f"/sessions/{first}").status_code == 200
    third = _new_session(client)
    assert len(server.SESSIONS) == 2
    assert client.get(f"/sessions/{second}").status_code == 404
    assert client.get(f"/sessions/{first}").status_code == 200
    assert client.get(f"/sessions/{third}").status_code == 200


def test_send_keeps_posted_form_for_placeholder(client, transport):
    sid = _new_session(client)
    res = client.post(f"/sessions/{sid}/send", json={"query": "centers near me", "intent": "LOOKUP_PROVIDER"})
    assert res.status_code == 200
    assert transport.payloads[0]["query"] == "centers near me"
    assert server.SESSIONS[sid].form.intent == "LOOKUP_PROVIDER"
    assert server.SESSIONS[sid].form.query == ""
