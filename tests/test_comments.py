"""Tests for question comments and responses."""


def _comment(client, user, message="Não entendi a resposta", user_type="aluno", **extra):
    body = {
        "questionId": "q1",
        "questionTheme": "história",
        "questionText": "Quem fundou a Capoeira Regional?",
        "userName": "Ana Souza",
        "userType": user_type,
        "message": message,
    }
    body.update(extra)
    return client.post("/api/comments", json=body, headers=user["headers"])


def test_create_comment(client, student):
    resp = _comment(client, student)
    assert resp.status_code == 201
    assert resp.json()["message"] == "Comment created"
    assert resp.json()["id"]


def test_create_comment_validation(client, student):
    assert _comment(client, student, message="   ").status_code == 400
    assert _comment(client, student, user_type="admin").status_code == 400


def test_comments_require_authentication(client):
    assert client.post("/api/comments", json={}).status_code == 401


def test_teacher_sees_linked_students_comments_with_responses(
    client, teacher, student, other_student, linked
):
    comment_id = _comment(client, student).json()["id"]
    _comment(client, other_student, message="Comentário de outro aluno")

    resp = client.post(
        "/api/comment-response",
        json={
            "commentId": comment_id,
            "userName": "Mestre Bimba",
            "userType": "professor",
            "message": "Foi Mestre Bimba, em 1928.",
        },
        headers=teacher["headers"],
    )
    assert resp.status_code == 201
    response_id = resp.json()["id"]

    resp = client.get(f"/api/teacher-comments/{teacher['user_id']}", headers=teacher["headers"])
    assert resp.status_code == 200
    comments = resp.json()["comments"]
    assert len(comments) == 1
    comment = comments[0]
    assert comment["id"] == comment_id
    assert comment["userId"] == student["user_id"]
    assert comment["questionId"] == "q1"
    assert [r["id"] for r in comment["responses"]] == [response_id]
    assert comment["responses"][0]["commentId"] == comment_id
    assert comment["responses"][0]["userId"] == teacher["user_id"]


def test_teacher_comments_only_for_self(client, teacher, other_teacher):
    resp = client.get(
        f"/api/teacher-comments/{teacher['user_id']}", headers=other_teacher["headers"]
    )
    assert resp.status_code == 403


def test_student_comments(client, student, other_student):
    first = _comment(client, student, message="primeiro").json()["id"]
    second = _comment(client, student, message="segundo").json()["id"]
    _comment(client, other_student)

    resp = client.get(f"/api/student-comments/{student['user_id']}", headers=student["headers"])
    assert resp.status_code == 200
    assert [c["id"] for c in resp.json()["comments"]] == [first, second]

    resp = client.get(
        f"/api/student-comments/{student['user_id']}", headers=other_student["headers"]
    )
    assert resp.status_code == 403


def test_question_comments(client, student, other_student):
    _comment(client, student)
    _comment(client, other_student)
    _comment(client, student, questionId="q2")
    resp = client.get("/api/question-comments/q1", headers=student["headers"])
    assert len(resp.json()["comments"]) == 2


def test_response_to_unknown_comment(client, teacher):
    resp = client.post(
        "/api/comment-response",
        json={
            "commentId": "missing",
            "userName": "Mestre Bimba",
            "userType": "professor",
            "message": "Olá",
        },
        headers=teacher["headers"],
    )
    assert resp.status_code == 404
