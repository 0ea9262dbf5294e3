"""Fixtures for F4 tests - Web API and CLI."""

import pytest
from fastapi.testclient import TestClient

from quizdesk.core.accounts import UserContext
from quizdesk.web.api import create_app

PASSWORD = "secret123"


@pytest.fixture
def client(db):
    """Test client on the isolated database."""
    app = create_app()
    return TestClient(app)


@pytest.fixture
def login(client):
    """Sign a user in and return Authorization headers."""

    def _login(user: UserContext) -> dict[str, str]:
        response = client.post(
            "/api/auth/signin", json={"email": user.email, "password": PASSWORD}
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login


@pytest.fixture
def instructor_headers(login, instructor):
    return login(instructor)


@pytest.fixture
def student_headers(login, student):
    return login(student)


@pytest.fixture
def admin_headers(login, admin_user):
    return login(admin_user)


@pytest.fixture
def quiz_payload() -> dict:
    """Two MCQs and one free-response question."""
    return {
        "title": "Fractions",
        "description": "Unit 3",
        "questions": [
            {"text": "1/2 + 1/2?", "correct_answer": 0},
            {"text": "1/4 of 8?", "correct_answer": 1, "explanation": "8 / 4"},
            {
                "text": "Why do fractions need common denominators?",
                "question_type": "free_response",
                "correct_answer": None,
                "model_answer": "To add like parts",
            },
        ],
    }


@pytest.fixture
def created_quiz(client, instructor_headers, quiz_payload, student):
    """Quiz created over the API and assigned to the default student."""
    response = client.post("/api/assignments", json=quiz_payload, headers=instructor_headers)
    assert response.status_code == 201, response.text
    detail = response.json()
    assignment_id = detail["assignment"]["id"]
    response = client.put(
        f"/api/assignments/{assignment_id}/students/{student.id}", headers=instructor_headers
    )
    assert response.status_code == 200, response.text
    return detail


@pytest.fixture
def quiz_answers():
    """Build a submit body from an assignment detail response."""

    def _answers(detail: dict, selections: list[int], text: str = "Same sized parts") -> dict:
        picks = iter(selections)
        answers = []
        for question in detail["questions"]:
            if question["question_type"] == "free_response":
                answers.append({"question_id": question["id"], "text_answer": text})
            else:
                answers.append({"question_id": question["id"], "selected_answer": next(picks)})
        return {"answers": answers}

    return _answers


@pytest.fixture
def submission(client, student_headers, created_quiz, quiz_answers):
    """The default student's submission with one of two MCQs right."""
    assignment_id = created_quiz["assignment"]["id"]
    response = client.post(
        f"/api/student/assignments/{assignment_id}/submit",
        json=quiz_answers(created_quiz, [0, 0]),
        headers=student_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()
