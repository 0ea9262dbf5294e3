"""Tests for submission detail, free-response grading and user removal endpoints (F4)."""

import pytest


@pytest.fixture
def other_instructor_headers(make_user, login):
    return login(make_user("instructor", name="Otto Other"))


@pytest.fixture
def frq_answer(client, instructor_headers, submission) -> dict:
    """The ungraded free-response answer of the default submission."""
    submission_id = submission["submission"]["id"]
    data = client.get(f"/api/submissions/{submission_id}/frq", headers=instructor_headers).json()
    return data["answers"][0]


class TestSubmissionDetail:
    """Tests for GET /api/submissions/{id}."""

    def test_visible_to_student_instructor_and_admin(
        self, client, student_headers, instructor_headers, admin_headers, submission
    ):
        submission_id = submission["submission"]["id"]
        for headers in (student_headers, instructor_headers, admin_headers):
            response = client.get(f"/api/submissions/{submission_id}", headers=headers)
            assert response.status_code == 200
            data = response.json()
            assert data["submission"]["id"] == submission_id
            assert len(data["answers"]) == 3
            assert data["questions"][0]["correct_answer"] == 0

    def test_hidden_from_other_student(self, client, make_user, login, submission):
        headers = login(make_user("student"))
        response = client.get(f"/api/submissions/{submission['submission']['id']}", headers=headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "You cannot view this submission"

    def test_hidden_from_other_instructor(self, client, other_instructor_headers, submission):
        response = client.get(
            f"/api/submissions/{submission['submission']['id']}", headers=other_instructor_headers
        )
        assert response.status_code == 403

    def test_unknown_submission(self, client, instructor_headers):
        response = client.get("/api/submissions/missing", headers=instructor_headers)
        assert response.status_code == 404

    def test_requires_token(self, client, submission):
        response = client.get(f"/api/submissions/{submission['submission']['id']}")
        assert response.status_code == 401


class TestFRQGrading:
    """Tests for GET/POST /api/submissions/{id}/frq."""

    def test_list_pending(self, client, instructor_headers, submission):
        submission_id = submission["submission"]["id"]
        data = client.get(f"/api/submissions/{submission_id}/frq", headers=instructor_headers).json()
        assert data["ungraded_count"] == 1
        answer = data["answers"][0]
        assert answer["text_answer"] == "Same sized parts"
        assert answer["model_answer"] == "To add like parts"
        assert answer["is_correct"] is None

    def test_grade_with_partial_credit(self, client, instructor_headers, submission, frq_answer):
        submission_id = submission["submission"]["id"]
        response = client.post(
            f"/api/submissions/{submission_id}/frq",
            json={"grades": [{"answer_id": frq_answer["id"], "is_correct": True, "points_earned": 0.5}]},
            headers=instructor_headers,
        )
        assert response.status_code == 200
        assert response.json() == {"submission_id": submission_id, "score": 1.5, "ungraded_count": 0}

        detail = client.get(f"/api/submissions/{submission_id}", headers=instructor_headers).json()
        assert detail["submission"]["percentage"] == 50

        listed = client.get(f"/api/submissions/{submission_id}/frq", headers=instructor_headers).json()
        assert listed["ungraded_count"] == 0
        assert listed["answers"][0]["points_earned"] == 0.5

    def test_grade_with_feedback(self, client, instructor_headers, submission, frq_answer):
        submission_id = submission["submission"]["id"]
        client.post(
            f"/api/submissions/{submission_id}/frq",
            json={"grades": [{"answer_id": frq_answer["id"], "is_correct": False, "feedback": "Mention parts"}]},
            headers=instructor_headers,
        )
        listed = client.get(f"/api/submissions/{submission_id}/frq", headers=instructor_headers).json()
        assert listed["answers"][0]["is_correct"] is False
        assert listed["answers"][0]["points_earned"] == 0

    def test_null_grade_is_skipped(self, client, instructor_headers, submission, frq_answer):
        submission_id = submission["submission"]["id"]
        response = client.post(
            f"/api/submissions/{submission_id}/frq",
            json={"grades": [{"answer_id": frq_answer["id"], "is_correct": None}]},
            headers=instructor_headers,
        )
        assert response.json() == {"submission_id": submission_id, "score": 1, "ungraded_count": 1}

    def test_points_out_of_range(self, client, instructor_headers, submission, frq_answer):
        response = client.post(
            f"/api/submissions/{submission['submission']['id']}/frq",
            json={"grades": [{"answer_id": frq_answer["id"], "is_correct": True, "points_earned": 2}]},
            headers=instructor_headers,
        )
        assert response.status_code == 400

    def test_answer_of_another_submission(self, client, instructor_headers, submission):
        response = client.post(
            f"/api/submissions/{submission['submission']['id']}/frq",
            json={"grades": [{"answer_id": "not-an-answer", "is_correct": True}]},
            headers=instructor_headers,
        )
        assert response.status_code == 400

    def test_other_instructor_cannot_list(self, client, other_instructor_headers, submission):
        response = client.get(
            f"/api/submissions/{submission['submission']['id']}/frq", headers=other_instructor_headers
        )
        assert response.status_code == 403
        assert response.json()["detail"] == "You do not manage this assignment"

    def test_other_instructor_cannot_grade(self, client, other_instructor_headers, submission, frq_answer):
        response = client.post(
            f"/api/submissions/{submission['submission']['id']}/frq",
            json={"grades": [{"answer_id": frq_answer["id"], "is_correct": True}]},
            headers=other_instructor_headers,
        )
        assert response.status_code == 403

    def test_admin_can_grade(self, client, admin_headers, submission, frq_answer):
        response = client.post(
            f"/api/submissions/{submission['submission']['id']}/frq",
            json={"grades": [{"answer_id": frq_answer["id"], "is_correct": True}]},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["score"] == 2

    def test_student_cannot_grade(self, client, student_headers, submission):
        response = client.get(
            f"/api/submissions/{submission['submission']['id']}/frq", headers=student_headers
        )
        assert response.status_code == 403
        assert response.json()["detail"] == "Instructor access required"

    def test_unknown_submission(self, client, instructor_headers):
        response = client.get("/api/submissions/missing/frq", headers=instructor_headers)
        assert response.status_code == 404


class TestDeleteUser:
    """Tests for DELETE /api/admin/users/{id}."""

    def test_removes_student_and_submissions(self, client, admin_headers, student, submission):
        response = client.delete(f"/api/admin/users/{student.id}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"success": True}

        detail = client.get(f"/api/submissions/{submission['submission']['id']}", headers=admin_headers)
        assert detail.status_code == 404

    def test_unknown_user(self, client, admin_headers):
        response = client.delete("/api/admin/users/missing", headers=admin_headers)
        assert response.status_code == 404

    def test_requires_admin(self, client, instructor_headers, student):
        response = client.delete(f"/api/admin/users/{student.id}", headers=instructor_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required"
