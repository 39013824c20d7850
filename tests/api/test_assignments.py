from __future__ import annotations

from uuid import uuid4

from fastapi.testclient import TestClient

from courseflow.models.user import TUTOR
from courseflow.repos.store import Store
from tests.conftest import (
    add_assignment,
    add_materials,
    add_user,
    auth,
    enroll,
    staff_token,
    student_token,
)


def _submit(client: TestClient, assignment_id, headers, **body):
    return client.post(
        f"/assignments/{assignment_id}/submit", json=body or None, headers=headers
    )


def test_submit_returns_submission_and_progress(
    client: TestClient, store: Store, tutor, student, course
) -> None:
    add_materials(store, course, 1)
    assignment = add_assignment(store, course, tutor)
    enroll(store, student, course)

    resp = _submit(
        client,
        assignment.id,
        auth(student_token(student)),
        content="answer",
        fileUrl="https://files.example.com/a.pdf",
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["submission"]["status"] == "SUBMITTED"
    assert body["submission"]["content"] == "answer"
    assert body["submission"]["fileUrl"] == "https://files.example.com/a.pdf"
    assert body["submission"]["score"] is None
    assert body["progressUpdate"] == {
        "progressPercentage": 0,
        "totalItems": 2,
        "completedItems": 1,
    }


def test_submit_without_body(
    client: TestClient, store: Store, tutor, student, course
) -> None:
    assignment = add_assignment(store, course, tutor)
    enroll(store, student, course)
    resp = _submit(client, assignment.id, auth(student_token(student)))
    assert resp.status_code == 201
    assert resp.json()["submission"]["content"] == ""


def test_duplicate_submission_conflicts(
    client: TestClient, store: Store, tutor, student, course
) -> None:
    assignment = add_assignment(store, course, tutor)
    enroll(store, student, course)
    headers = auth(student_token(student))

    first = _submit(client, assignment.id, headers, content="v1")
    second = _submit(client, assignment.id, headers, content="v2")
    assert first.status_code == 201
    assert second.status_code == 409

    overview = client.get(f"/enrollments/progress/{course.id}", headers=headers)
    submission = overview.json()["assignments"][0]["submission"]
    assert submission["content"] == "v1"


def test_late_submission_rejected(
    client: TestClient, store: Store, tutor, student, course
) -> None:
    assignment = add_assignment(store, course, tutor, due_date=1_000)
    enroll(store, student, course)
    resp = _submit(client, assignment.id, auth(student_token(student)))
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Assignment due date has passed"


def test_submit_not_enrolled(
    client: TestClient, store: Store, tutor, student, course
) -> None:
    assignment = add_assignment(store, course, tutor)
    resp = _submit(client, assignment.id, auth(student_token(student)))
    assert resp.status_code == 403


def test_submit_unknown_assignment(client: TestClient, student) -> None:
    resp = _submit(client, uuid4(), auth(student_token(student)))
    assert resp.status_code == 404


# ---- grading ----


def _submission_id(client: TestClient, store: Store, tutor, student, course, **kw):
    assignment = add_assignment(store, course, tutor, **kw)
    enroll(store, student, course)
    resp = _submit(client, assignment.id, auth(student_token(student)))
    return resp.json()["submission"]["id"]


def test_grade_submission(
    client: TestClient, store: Store, tutor, student, course
) -> None:
    submission_id = _submission_id(client, store, tutor, student, course, max_score=10)
    resp = client.put(
        f"/assignments/submissions/{submission_id}/grade",
        json={"score": 9, "feedback": "Nice"},
        headers=auth(staff_token(tutor)),
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "GRADED"
    assert body["score"] == 9
    assert body["feedback"] == "Nice"
    assert body["gradedAt"] is not None


def test_grade_above_max_is_rejected(
    client: TestClient, store: Store, tutor, student, course
) -> None:
    submission_id = _submission_id(client, store, tutor, student, course, max_score=10)
    url = f"/assignments/submissions/{submission_id}/grade"
    resp = client.put(url, json={"score": 11}, headers=auth(staff_token(tutor)))
    assert resp.status_code == 400
    assert resp.json()["code"] == "validation_failed"

    # Still gradeable afterwards.
    resp = client.put(url, json={"score": 10}, headers=auth(staff_token(tutor)))
    assert resp.status_code == 200


def test_regrade_is_conflict(
    client: TestClient, store: Store, tutor, student, course
) -> None:
    submission_id = _submission_id(client, store, tutor, student, course)
    url = f"/assignments/submissions/{submission_id}/grade"
    headers = auth(staff_token(tutor))
    assert client.put(url, json={"score": 50}, headers=headers).status_code == 200
    resp = client.put(url, json={"score": 60}, headers=headers)
    assert resp.status_code == 409


def test_grade_requires_creator_or_admin(
    client: TestClient, store: Store, tutor, admin, student, course
) -> None:
    submission_id = _submission_id(client, store, tutor, student, course)
    url = f"/assignments/submissions/{submission_id}/grade"
    stranger = add_user(store, "stranger@example.com", (TUTOR,))

    resp = client.put(url, json={"score": 1}, headers=auth(staff_token(stranger)))
    assert resp.status_code == 403
    resp = client.put(url, json={"score": 1}, headers=auth(staff_token(admin)))
    assert resp.status_code == 200


def test_grade_unknown_submission(client: TestClient, tutor) -> None:
    resp = client.put(
        f"/assignments/submissions/{uuid4()}/grade",
        json={"score": 1},
        headers=auth(staff_token(tutor)),
    )
    assert resp.status_code == 404
