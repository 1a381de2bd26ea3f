"""Tests for quiz draws, answers and student ranks."""

import pytest

from utils.user_manager import STUDENT_RANKS, rank_for_score


@pytest.mark.parametrize(
    "score, expected",
    [
        (0, "Aluno Novo (Iniciante)"),
        (1, "Cordão Cru (Iniciante)"),
        (2, "Cordão Cru (Iniciante)"),
        (3, "Cordão Amarelo (Estagiário)"),
        (11, "Cordão Azul (Instrutor)"),
        (12, "Cordão Verde (Professor)"),
        (34, "Cordão Marrom (Contramestre)"),
        (35, "Cordão Vermelho (Mestre)"),
        (500, "Cordão Vermelho (Mestre)"),
    ],
)
def test_rank_for_score(score, expected):
    assert rank_for_score(score) == expected


def test_rank_thresholds_ascend():
    thresholds = [threshold for threshold, _ in STUDENT_RANKS]
    assert thresholds == sorted(thresholds)


def _answer(client, user, question_id, index):
    return client.post(
        "/api/quiz/answer",
        json={"questionId": question_id, "selectedOptionIndex": index},
        headers=user["headers"],
    )


def test_draw_respects_limit(client, teacher, student, make_question):
    ids = {make_question(teacher) for _ in range(5)}
    resp = client.get("/api/quiz/questions", params={"limit": 3}, headers=student["headers"])
    assert resp.status_code == 200
    drawn = [q["id"] for q in resp.json()]
    assert len(drawn) == 3
    assert set(drawn) <= ids


def test_draw_limit_bounds(client, student):
    for limit in (0, 51):
        resp = client.get("/api/quiz/questions", params={"limit": limit}, headers=student["headers"])
        assert resp.status_code == 400


def test_draw_by_teacher_hides_private_from_unlinked(
    client, teacher, other_teacher, student, make_question
):
    public_id = make_question(teacher)
    make_question(teacher, visibility="private")
    make_question(other_teacher)

    resp = client.get(
        "/api/quiz/questions", params={"teacherId": teacher["user_id"]}, headers=student["headers"]
    )
    assert [q["id"] for q in resp.json()] == [public_id]


def test_draw_by_teacher_includes_private_when_linked(
    client, teacher, student, linked, make_question
):
    ids = {make_question(teacher), make_question(teacher, visibility="private")}
    resp = client.get(
        "/api/quiz/questions", params={"teacherId": teacher["user_id"]}, headers=student["headers"]
    )
    assert {q["id"] for q in resp.json()} == ids


def test_correct_answer_scores_and_ranks(client, teacher, student, make_question):
    question_id = make_question(teacher)
    resp = _answer(client, student, question_id, 0)
    assert resp.status_code == 200
    data = resp.json()
    assert data["correct"] is True
    assert data["correctOptionIndex"] == 0
    assert data["feedback"]["title"] == "Capoeira Regional"
    assert data["score"] == 1
    assert data["rank"] == "Cordão Cru (Iniciante)"

    for expected_score in (2, 3):
        data = _answer(client, student, question_id, 0).json()
        assert data["score"] == expected_score
    assert data["rank"] == "Cordão Amarelo (Estagiário)"


def test_wrong_answer_keeps_score(client, teacher, student, make_question):
    question_id = make_question(teacher)
    _answer(client, student, question_id, 0)
    data = _answer(client, student, question_id, 1).json()
    assert data["correct"] is False
    assert data["score"] == 1
    assert data["rank"] == "Cordão Cru (Iniciante)"


def test_teacher_answers_are_not_scored(client, teacher, make_question):
    question_id = make_question(teacher)
    data = _answer(client, teacher, question_id, 0).json()
    assert data["correct"] is True
    assert data["score"] is None
    assert data["rank"] is None


def test_answer_errors(client, teacher, student, make_question):
    assert _answer(client, student, "missing", 0).status_code == 404

    private_id = make_question(teacher, visibility="private")
    assert _answer(client, student, private_id, 0).status_code == 404

    public_id = make_question(teacher)
    assert _answer(client, student, public_id, 7).status_code == 400


def test_score_shows_up_in_students_data(client, teacher, student, linked, make_question):
    question_id = make_question(teacher)
    _answer(client, student, question_id, 0)
    rows = client.get("/api/students_data", headers=teacher["headers"]).json()
    assert rows[0]["score"] == 1
    assert rows[0]["rank"] == "Cordão Cru (Iniciante)"
