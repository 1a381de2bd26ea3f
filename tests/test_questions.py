"""Tests for the question bank routes."""

from conftest import question_payload


def test_teacher_creates_question(client, teacher):
    resp = client.post("/api/questions", json=question_payload(), headers=teacher["headers"])
    assert resp.status_code == 201
    assert resp.json()["message"] == "Question created"

    items = client.get("/api/questions", headers=teacher["headers"]).json()
    assert len(items) == 1
    item = items[0]
    assert item["id"] == resp.json()["id"]
    assert item["theme"] == "história"
    assert item["correctOptionIndex"] == 0
    assert item["feedback"] == {
        "title": "Capoeira Regional",
        "text": "Mestre Bimba criou a Luta Regional Baiana em 1928.",
        "illustration": "",
    }
    assert item["createdBy"] == teacher["user_id"]
    assert item["visibility"] == "public"
    assert item["updatedAt"] is None


def test_student_cannot_create_question(client, student):
    resp = client.post("/api/questions", json=question_payload(), headers=student["headers"])
    assert resp.status_code == 403


def test_questions_require_authentication(client):
    assert client.get("/api/questions").status_code == 401


def test_create_question_validation(client, teacher):
    cases = [
        question_payload(options=["only one"]),
        question_payload(options=["a", " "]),
        question_payload(correctOptionIndex=3),
        question_payload(theme="  "),
        question_payload(visibility="secret"),
        question_payload(feedback={"title": "", "text": "x"}),
    ]
    for body in cases:
        resp = client.post("/api/questions", json=body, headers=teacher["headers"])
        assert resp.status_code == 400, body


def test_private_questions_visible_to_owner_and_linked_students(
    client, teacher, other_teacher, student, other_student, linked, make_question
):
    public_id = make_question(teacher)
    private_id = make_question(teacher, visibility="private")

    def visible_ids(user):
        resp = client.get("/api/questions", headers=user["headers"])
        assert resp.status_code == 200
        return {q["id"] for q in resp.json()}

    assert visible_ids(teacher) == {public_id, private_id}
    assert visible_ids(student) == {public_id, private_id}
    assert visible_ids(other_student) == {public_id}
    assert visible_ids(other_teacher) == {public_id}


def test_list_filters(client, teacher, other_teacher, make_question):
    mine = make_question(teacher, theme="Música")
    make_question(teacher, theme="História")
    theirs = make_question(other_teacher, theme="Música")

    resp = client.get("/api/questions", params={"theme": "música"}, headers=teacher["headers"])
    assert {q["id"] for q in resp.json()} == {mine, theirs}

    resp = client.get(
        "/api/questions",
        params={"theme": "Música", "createdBy": teacher["user_id"]},
        headers=teacher["headers"],
    )
    assert [q["id"] for q in resp.json()] == [mine]


def test_list_themes(client, teacher, make_question):
    make_question(teacher, theme="Música")
    make_question(teacher, theme="História")
    make_question(teacher, theme="música")
    resp = client.get("/api/questions/themes", headers=teacher["headers"])
    assert resp.json() == ["história", "música"]


def test_update_question(client, teacher, make_question):
    question_id = make_question(teacher)
    body = question_payload(question="Em que ano nasceu Mestre Bimba?", options=["1899", "1900"])
    resp = client.put(f"/api/questions/{question_id}", json=body, headers=teacher["headers"])
    assert resp.status_code == 200
    assert resp.json()["id"] == question_id

    item = client.get("/api/questions", headers=teacher["headers"]).json()[0]
    assert item["question"] == "Em que ano nasceu Mestre Bimba?"
    assert item["options"] == ["1899", "1900"]
    assert item["updatedAt"] is not None


def test_only_author_can_change_question(client, teacher, other_teacher, make_question):
    question_id = make_question(teacher)
    headers = other_teacher["headers"]
    assert client.put(
        f"/api/questions/{question_id}", json=question_payload(), headers=headers
    ).status_code == 403
    assert client.delete(f"/api/questions/{question_id}", headers=headers).status_code == 403
    assert client.patch(
        f"/api/questions/{question_id}/visibility", json={"visibility": "private"}, headers=headers
    ).status_code == 403


def test_missing_question_is_404(client, teacher):
    headers = teacher["headers"]
    assert client.put(
        "/api/questions/missing", json=question_payload(), headers=headers
    ).status_code == 404
    assert client.delete("/api/questions/missing", headers=headers).status_code == 404
    assert client.patch(
        "/api/questions/missing/visibility", json={"visibility": "public"}, headers=headers
    ).status_code == 404


def test_delete_question(client, teacher, make_question):
    question_id = make_question(teacher)
    resp = client.delete(f"/api/questions/{question_id}", headers=teacher["headers"])
    assert resp.status_code == 200
    assert client.get("/api/questions", headers=teacher["headers"]).json() == []


def test_visibility_toggle(client, teacher, other_teacher, make_question, db):
    from models.question import QuestionModel

    question_id = make_question(teacher)
    resp = client.patch(
        f"/api/questions/{question_id}/visibility",
        json={"visibility": "private"},
        headers=teacher["headers"],
    )
    assert resp.status_code == 200
    assert resp.json() == {
        "message": "Visibility updated",
        "questionId": question_id,
        "visibility": "private",
    }
    model = db.query(QuestionModel).filter(QuestionModel.question_id == question_id).one()
    assert model.updated_by == teacher["user_id"]
    assert client.get("/api/questions", headers=other_teacher["headers"]).json() == []

    resp = client.patch(
        f"/api/questions/{question_id}/visibility",
        json={"visibility": "hidden"},
        headers=teacher["headers"],
    )
    assert resp.status_code == 400


QUESTIONNAIRE = """<?xml version="1.0" encoding="UTF-8"?>
<root>
  <theme name="Tecnologia">
    <question>
      <text>Qual é a linguagem de programação?</text>
      <option>Python</option>
      <option>Java</option>
      <option>JavaScript</option>
      <correct>0</correct>
      <feedback-title>Correto!</feedback-title>
      <feedback-text>Python é uma linguagem versátil</feedback-text>
      <feedback-illustration>https://example.com/image.jpg</feedback-illustration>
    </question>
  </theme>
  <theme name="história">
    <question>
      <text>Quem fundou a Capoeira Angola?</text>
      <option>Mestre Bimba</option>
      <option>Mestre Pastinha</option>
      <correct>1</correct>
      <feedback-title>Capoeira Angola</feedback-title>
      <feedback-text>Mestre Pastinha fundou o CECA em 1941.</feedback-text>
      <visibility>private</visibility>
    </question>
  </theme>
</root>
"""


def _upload(client, user, content, filename="questoes.xml"):
    if isinstance(content, str):
        content = content.encode("utf-8")
    return client.post(
        "/upload_questions_xml",
        files={"file": (filename, content, "application/xml")},
        headers=user["headers"],
    )


def test_upload_questions_xml(client, teacher):
    resp = _upload(client, teacher, QUESTIONNAIRE)
    assert resp.status_code == 200
    data = resp.json()
    assert data["created"] == 2
    assert len(data["ids"]) == 2
    assert "2" in data["message"]

    questions = {
        q["question"]: q
        for q in client.get("/api/questions", headers=teacher["headers"]).json()
    }
    tech = questions["Qual é a linguagem de programação?"]
    assert tech["theme"] == "tecnologia"
    assert tech["options"] == ["Python", "Java", "JavaScript"]
    assert tech["correctOptionIndex"] == 0
    assert tech["feedback"]["illustration"] == "https://example.com/image.jpg"
    assert tech["visibility"] == "public"
    assert tech["createdBy"] == teacher["user_id"]

    angola = questions["Quem fundou a Capoeira Angola?"]
    assert angola["correctOptionIndex"] == 1
    assert angola["feedback"]["illustration"] == ""
    assert angola["visibility"] == "private"


def test_upload_malformed_xml(client, teacher):
    resp = _upload(client, teacher, "<root><theme name='x'><question>")
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("Malformed XML")
    assert client.get("/api/questions", headers=teacher["headers"]).json() == []


def test_upload_is_all_or_nothing(client, teacher):
    broken = QUESTIONNAIRE.replace("<correct>1</correct>", "<correct>5</correct>")
    resp = _upload(client, teacher, broken)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Question 2: correctOptionIndex is out of range"
    assert client.get("/api/questions", headers=teacher["headers"]).json() == []


def test_upload_rejects_bad_correct_and_empty_files(client, teacher):
    broken = QUESTIONNAIRE.replace("<correct>0</correct>", "<correct>first</correct>")
    resp = _upload(client, teacher, broken)
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("Question 1:")

    assert _upload(client, teacher, "<root/>").status_code == 400
    nameless = QUESTIONNAIRE.replace('name="Tecnologia"', "")
    assert _upload(client, teacher, nameless).status_code == 400


def test_student_cannot_upload_questions(client, student):
    resp = _upload(client, student, QUESTIONNAIRE)
    assert resp.status_code == 403
    assert "error" in resp.json()


def test_upload_requires_authentication(client):
    resp = client.post(
        "/upload_questions_xml",
        files={"file": ("questoes.xml", QUESTIONNAIRE.encode("utf-8"), "application/xml")},
    )
    assert resp.status_code == 401


def test_upload_rejects_other_file_types(client, teacher):
    assert _upload(client, teacher, QUESTIONNAIRE, filename="questoes.txt").status_code == 415


def test_upload_rejects_large_files(client, teacher, monkeypatch):
    from api.routes import question as question_routes

    monkeypatch.setattr(question_routes, "MAX_XML_UPLOAD_SIZE", 100)
    assert _upload(client, teacher, QUESTIONNAIRE).status_code == 413
