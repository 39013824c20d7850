"""Material access, completion and the progress overview over HTTP."""

from __future__ import annotations

from uuid import uuid4

from fastapi.testclient import TestClient

from courseflow.models.user import STUDENT
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


def test_get_material_tracks_access(
    client: TestClient, store: Store, student, course
) -> None:
    (m1,) = add_materials(store, course, 1)
    enroll(store, student, course)
    headers = auth(student_token(student))

    client.get(f"/materials/{m1.id}", headers=headers)
    resp = client.get(f"/materials/{m1.id}", headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == str(m1.id)
    assert body["title"] == "Lesson 1"
    assert body["progress"]["timeSpent"] == 2
    assert body["progress"]["isCompleted"] is False


def test_get_material_requires_enrollment(
    client: TestClient, store: Store, student, course
) -> None:
    (m1,) = add_materials(store, course, 1)
    resp = client.get(f"/materials/{m1.id}", headers=auth(student_token(student)))
    assert resp.status_code == 403
    assert resp.json()["code"] == "forbidden"


def test_complete_material_reports_progress(
    client: TestClient, store: Store, tutor, student, course
) -> None:
    m1, m2, m3 = add_materials(store, course, 3)
    add_assignment(store, course, tutor)
    enroll(store, student, course)
    headers = auth(student_token(student))

    resp = client.post(f"/materials/{m1.id}/complete", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {
        "progressPercentage": 33,
        "isCompleted": True,
        "totalItems": 4,
        "completedItems": 1,
    }

    client.post(f"/materials/{m2.id}/complete", headers=headers)
    resp = client.post(f"/materials/{m2.id}/complete", headers=headers)
    assert resp.json()["progressPercentage"] == 67
    assert resp.json()["completedItems"] == 2


def test_completing_every_material_completes_enrollment(
    client: TestClient, store: Store, student, course
) -> None:
    materials = add_materials(store, course, 2)
    enroll(store, student, course)
    headers = auth(student_token(student))

    for m in materials:
        client.post(f"/materials/{m.id}/complete", headers=headers)

    body = client.get(f"/enrollments/progress/{course.id}", headers=headers).json()
    assert body["enrollment"]["status"] == "COMPLETED"
    assert body["enrollment"]["progressPercentage"] == 100
    assert body["enrollment"]["completedAt"] is not None


def test_complete_unknown_material(client: TestClient, student) -> None:
    resp = client.post(
        f"/materials/{uuid4()}/complete", headers=auth(student_token(student))
    )
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Material not found", "code": "not_found"}


def test_progress_overview_shape(
    client: TestClient, store: Store, tutor, student, course
) -> None:
    m1, m2 = add_materials(store, course, 2)
    assignment = add_assignment(store, course, tutor, max_score=20)
    enroll(store, student, course)
    headers = auth(student_token(student))

    client.get(f"/materials/{m1.id}", headers=headers)
    client.post(f"/materials/{m1.id}/complete", headers=headers)

    resp = client.get(f"/enrollments/progress/{course.id}", headers=headers)
    assert resp.status_code == 200
    body = resp.json()

    assert [m["id"] for m in body["materials"]] == [str(m1.id), str(m2.id)]
    assert body["materials"][0]["progress"]["isCompleted"] is True
    assert body["materials"][1]["progress"] is None

    assert body["assignments"][0]["id"] == str(assignment.id)
    assert body["assignments"][0]["maxScore"] == 20
    assert body["assignments"][0]["submission"] is None

    assert body["stats"] == {
        "totalMaterials": 2,
        "completedMaterials": 1,
        "totalAssignments": 1,
        "submittedAssignments": 0,
        "totalItems": 3,
        "completedItems": 1,
        "progressPercentage": 50,
        "totalTimeSpent": 1,
    }


def test_progress_overview_of_another_student_needs_course_manager(
    client: TestClient, store: Store, tutor, student, course
) -> None:
    enroll(store, student, course)
    snoop = add_user(store, "snoop@example.com", (STUDENT,))
    url = f"/enrollments/progress/{course.id}?studentId={student.id}"

    assert client.get(url, headers=auth(student_token(snoop))).status_code == 403
    resp = client.get(url, headers=auth(staff_token(tutor)))
    assert resp.status_code == 200
    assert resp.json()["enrollment"]["studentId"] == str(student.id)


def test_progress_overview_not_enrolled(
    client: TestClient, student, course
) -> None:
    resp = client.get(
        f"/enrollments/progress/{course.id}", headers=auth(student_token(student))
    )
    assert resp.status_code == 404
