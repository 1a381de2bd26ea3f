"""Tests for the chat routes."""


def _send(client, sender, receiver, message):
    return client.post(
        "/api/chat",
        json={"receiverId": receiver["user_id"], "message": message},
        headers=sender["headers"],
    )


def _conversation(client, caller, a, b, **params):
    params.update({"senderId": a["user_id"], "receiverId": b["user_id"]})
    return client.get("/api/chat", params=params, headers=caller["headers"])


def test_send_message(client, student, teacher):
    resp = _send(client, student, teacher, "Oi, mestre!")
    assert resp.status_code == 201
    assert resp.json()["message"] == "Message sent"
    assert isinstance(resp.json()["id"], int)


def test_blank_message_is_rejected(client, student, teacher):
    assert _send(client, student, teacher, "   ").status_code == 400


def test_conversation_contains_both_directions_in_order(client, student, teacher, other_student):
    _send(client, student, teacher, "Oi, mestre!")
    _send(client, teacher, student, "Olá, Ana.")
    _send(client, other_student, teacher, "Mensagem de outro aluno")

    resp = _conversation(client, teacher, student, teacher)
    assert resp.status_code == 200
    messages = resp.json()
    assert [m["message"] for m in messages] == ["Oi, mestre!", "Olá, Ana."]
    first = messages[0]
    assert first["senderId"] == student["user_id"]
    assert first["senderName"] == "Ana Souza"
    assert first["senderType"] == "aluno"
    assert first["receiverId"] == teacher["user_id"]


def test_conversation_after_filter(client, student, teacher):
    _send(client, student, teacher, "primeira")
    first = _conversation(client, student, student, teacher).json()[0]
    _send(client, teacher, student, "segunda")

    resp = _conversation(client, student, student, teacher, after=first["createdAt"])
    assert [m["message"] for m in resp.json()] == ["segunda"]


def test_outsider_cannot_read_conversation(client, student, teacher, other_student):
    _send(client, student, teacher, "segredo")
    resp = _conversation(client, other_student, student, teacher)
    assert resp.status_code == 403


def test_conversation_requires_ids(client, student):
    resp = client.get("/api/chat", params={"senderId": student["user_id"]}, headers=student["headers"])
    assert resp.status_code == 400
