"""Tests for the Prometheus metrics middleware and engine counters.

Counters live in the global registry and cannot be reset between tests,
so every assertion is on the delta around the action.
"""

from __future__ import annotations

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from courseflow.repos.store import Store
from tests.conftest import add_materials, auth, enroll, staff_token, student_token


def _get_sample(name: str, labels: dict | None = None) -> float:
    value = REGISTRY.get_sample_value(name, labels=labels or {})
    return value if value is not None else 0.0


def test_request_counter_increments(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/health", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/health")
    assert _get_sample("http_requests_total", labels) - before >= 1


def test_endpoint_label_is_route_template(
    client: TestClient, store: Store, student, course
) -> None:
    (m1,) = add_materials(store, course, 1)
    enroll(store, student, course)
    labels = {
        "method": "POST",
        "endpoint": "/materials/{material_id}/complete",
        "status_code": "200",
    }
    before = _get_sample("http_requests_total", labels)
    client.post(f"/materials/{m1.id}/complete", headers=auth(student_token(student)))
    assert _get_sample("http_requests_total", labels) - before == 1


def test_metrics_endpoint_exposes_engine_counters(
    client: TestClient, store: Store, tutor, student, course
) -> None:
    add_materials(store, course, 1)
    enroll(store, student, course)
    labels = {"trigger": "material_added"}
    before = _get_sample("progress_recomputations_total", labels)

    client.post(
        f"/courses/{course.id}/materials",
        json={"title": "Extra", "orderIndex": 1},
        headers=auth(staff_token(tutor)),
    )
    assert _get_sample("progress_recomputations_total", labels) - before == 1

    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "progress_recomputations_total" in resp.text
    assert "http_request_duration_seconds" in resp.text


def test_session_rejections_are_counted(client: TestClient, student, course) -> None:
    labels = {"reason": "mismatch"}
    before = _get_sample("session_gate_rejections_total", labels)
    stale = student_token(student)
    student_token(student)
    client.get(f"/enrollments/progress/{course.id}", headers=auth(stale))
    assert _get_sample("session_gate_rejections_total", labels) - before == 1


def test_metrics_endpoint_not_self_instrumented(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/metrics", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/metrics")
    client.get("/metrics")
    assert _get_sample("http_requests_total", labels) == before
