"""Test chat endpoints end to end"""

import pytest

from app.services.orchestrator import FALLBACK_MESSAGE

pytestmark = pytest.mark.unit


def chat(client, headers, message, goal="stress-relief", **extra):
    return client.post("/api/chat", json={"message": message, "goal": goal, **extra}, headers=headers)


def profile(client, headers):
    return client.get("/api/auth/me", headers=headers).json()


def test_stress_relief_scenario(client, auth):
    headers = auth["headers"]

    response = chat(client, headers, "I am feeling stressed today")
    assert response.status_code == 200
    data = response.json()
    conversation_id = data["conversationId"]
    assert len(conversation_id) == 24
    assert data["messageId"]
    assert data["timestamp"]
    assert data["aiProvider"] == "openai"
    assert data["response"] == "Reply from openai"

    response = chat(client, headers, "Thank you, that helped", conversationId=conversation_id)
    assert response.status_code == 200
    assert response.json()["conversationId"] == conversation_id

    detail = client.get(f"/api/chat/{conversation_id}", headers=headers).json()["conversation"]
    assert detail["id"] == conversation_id
    assert detail["goal"] == "stress-relief"
    assert [m["content"] for m in detail["messages"]] == [
        "I am feeling stressed today",
        "Reply from openai",
        "Thank you, that helped",
        "Reply from openai",
    ]
    assert detail["createdAt"] and detail["updatedAt"]

    me = profile(client, headers)
    assert me["conversationCount"] == 1
    assert me["totalMessages"] == 4


def test_each_turn_without_id_starts_new_conversation(client, auth):
    headers = auth["headers"]

    ids = {chat(client, headers, f"hello {i}", "polite-greetings").json()["conversationId"] for i in range(3)}

    assert len(ids) == 3
    assert profile(client, headers)["conversationCount"] == 3


def test_n_turns_give_2n_messages_in_order(client, auth):
    headers = auth["headers"]
    conversation_id = chat(client, headers, "turn 0").json()["conversationId"]
    for i in range(1, 4):
        chat(client, headers, f"turn {i}", conversationId=conversation_id)

    messages = client.get(f"/api/chat/{conversation_id}", headers=headers).json()["conversation"]["messages"]

    assert len(messages) == 8
    assert [m["content"] for m in messages[::2]] == ["turn 0", "turn 1", "turn 2", "turn 3"]
    assert [m["role"] for m in messages] == ["user", "assistant"] * 4


def test_all_providers_failing_is_still_a_successful_turn(client, auth, providers):
    for provider in providers:
        provider.fail = True

    response = chat(client, auth["headers"], "hello?")

    assert response.status_code == 200
    data = response.json()
    assert data["aiProvider"] == "none"
    assert data["response"] == FALLBACK_MESSAGE

    detail = client.get(f"/api/chat/{data['conversationId']}", headers=auth["headers"]).json()
    assert len(detail["conversation"]["messages"]) == 2


def test_saved_provider_preference_is_used(client, auth):
    client.put("/api/settings", json={"defaultAiProvider": "gemini"}, headers=auth["headers"])

    assert chat(client, auth["headers"], "hi").json()["aiProvider"] == "gemini"
    assert chat(client, auth["headers"], "hi", aiProvider="anthropic").json()["aiProvider"] == "anthropic"


@pytest.mark.parametrize("body", [
    {"message": "", "goal": "stress-relief"},
    {"message": "   ", "goal": "stress-relief"},
    {"message": "x" * 1001, "goal": "stress-relief"},
    {"message": "hello", "goal": "take-over-the-world"},
    {"message": "hello"},
    {"goal": "stress-relief"},
    {"message": "hello", "goal": "stress-relief", "conversationId": "123"},
])
def test_chat_validation_errors(client, auth, body):
    response = client.post("/api/chat", json=body, headers=auth["headers"])

    assert response.status_code == 400
    data = response.json()
    assert data["code"] == "VALIDATION_ERROR"
    assert data["details"]


def test_custom_goal_is_accepted(client, auth):
    response = chat(client, auth["headers"], "hi", goal="custom:practice small talk")
    assert response.status_code == 200


def test_unknown_conversation_id(client, auth):
    response = chat(client, auth["headers"], "hi", conversationId="a" * 24)

    assert response.status_code == 404
    assert response.json() == {"error": "Conversation not found", "code": "CONVERSATION_NOT_FOUND"}


def test_chat_requires_authentication(client):
    response = chat(client, {}, "hi")
    assert response.status_code == 401
    assert response.json()["code"] == "AUTH_TOKEN_MISSING"

    response = chat(client, {"Authorization": "Bearer not-a-jwt"}, "hi")
    assert response.status_code == 401
    assert response.json()["code"] == "AUTH_TOKEN_INVALID"


def test_get_conversation_invalid_id(client, auth):
    response = client.get("/api/chat/not-a-valid-id", headers=auth["headers"])

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_ID"


def test_ownership_isolation(client, register_user):
    alice = register_user("alice@example.com")
    bob = register_user("bob@example.com")
    conversation_id = chat(client, alice["headers"], "my secret").json()["conversationId"]

    assert client.get(f"/api/chat/{conversation_id}", headers=bob["headers"]).status_code == 404
    assert client.delete(f"/api/chat/{conversation_id}", headers=bob["headers"]).status_code == 404
    assert chat(client, bob["headers"], "hi", conversationId=conversation_id).status_code == 404
    assert client.get("/api/chat", headers=bob["headers"]).json()["pagination"]["total"] == 0

    detail = client.get(f"/api/chat/{conversation_id}", headers=alice["headers"])
    assert detail.status_code == 200
    assert len(detail.json()["conversation"]["messages"]) == 2


def test_list_pagination(client, auth):
    headers = auth["headers"]
    ids = [chat(client, headers, f"conversation {i}").json()["conversationId"] for i in range(25)]
    newest_first = list(reversed(ids))

    data = client.get("/api/chat?page=2&limit=10", headers=headers).json()

    assert [c["id"] for c in data["conversations"]] == newest_first[10:20]
    assert data["pagination"] == {
        "page": 2, "limit": 10, "total": 25, "totalPages": 3, "hasNext": True, "hasPrev": True
    }
    summary = data["conversations"][0]
    assert summary["messageCount"] == 2
    assert summary["lastMessage"]["role"] == "assistant"
    assert "messages" not in summary

    last = client.get("/api/chat?page=3&limit=10", headers=headers).json()
    assert len(last["conversations"]) == 5
    assert last["pagination"]["hasNext"] is False

    first = client.get("/api/chat", headers=headers).json()
    assert first["pagination"]["page"] == 1
    assert first["pagination"]["limit"] == 10
    assert first["pagination"]["hasPrev"] is False


@pytest.mark.parametrize("query", ["limit=51", "page=-1&limit=5", "limit=-3"])
def test_list_invalid_pagination(client, auth, query):
    response = client.get(f"/api/chat?{query}", headers=auth["headers"])

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_PAGINATION"


@pytest.mark.parametrize("query,expected", [
    ("page=abc&limit=xyz", (1, 10)),
    ("page=0&limit=0", (1, 10)),
    ("page=&limit=", (1, 10)),
    ("page=2abc&limit=5.9", (2, 5)),
])
def test_list_unparseable_pagination_falls_back_to_defaults(client, auth, query, expected):
    response = client.get(f"/api/chat?{query}", headers=auth["headers"])

    assert response.status_code == 200
    pagination = response.json()["pagination"]
    assert (pagination["page"], pagination["limit"]) == expected


def test_cached_detail_reflects_new_messages(client, auth, fake_redis):
    headers = auth["headers"]
    conversation_id = chat(client, headers, "first").json()["conversationId"]

    before = client.get(f"/api/chat/{conversation_id}", headers=headers).json()
    assert len(before["conversation"]["messages"]) == 2
    assert any(key.endswith(f"/chat/{conversation_id}?") for key in fake_redis.entries())

    chat(client, headers, "second", conversationId=conversation_id)

    after = client.get(f"/api/chat/{conversation_id}", headers=headers).json()
    assert len(after["conversation"]["messages"]) == 4


def test_cached_list_reflects_new_conversation(client, auth):
    headers = auth["headers"]
    chat(client, headers, "one")
    assert client.get("/api/chat", headers=headers).json()["pagination"]["total"] == 1

    chat(client, headers, "two")

    assert client.get("/api/chat", headers=headers).json()["pagination"]["total"] == 2


def test_delete_conversation(client, auth):
    headers = auth["headers"]
    conversation_id = chat(client, headers, "bye").json()["conversationId"]
    client.get("/api/chat", headers=headers)

    response = client.delete(f"/api/chat/{conversation_id}", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Conversation deleted successfully", "conversationId": conversation_id}

    assert client.get(f"/api/chat/{conversation_id}", headers=headers).status_code == 404
    assert client.get("/api/chat", headers=headers).json()["conversations"] == []

    repeat = client.delete(f"/api/chat/{conversation_id}", headers=headers)
    assert repeat.status_code == 404
    assert repeat.json()["code"] == "CONVERSATION_NOT_FOUND"

    assert client.delete("/api/chat/xyz", headers=headers).json()["code"] == "INVALID_ID"


def test_store_failure_returns_generic_500(client, auth, store, monkeypatch):
    from sqlalchemy.exc import IntegrityError

    def broken_insert(*args, **kwargs):
        raise IntegrityError("INSERT INTO messages", {}, Exception("uq_conversation_position violated"))

    monkeypatch.setattr(store, "_add_messages", broken_insert)

    response = chat(client, auth["headers"], "hello")

    assert response.status_code == 500
    assert response.json() == {"error": "Server error, please try again later", "code": "SERVER_ERROR"}

    listing = client.get("/api/chat", headers=auth["headers"]).json()
    assert listing["pagination"]["total"] == 0
    assert profile(client, auth["headers"])["conversationCount"] == 0
