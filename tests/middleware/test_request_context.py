from __future__ import annotations

import logging
import uuid

import pytest
from fastapi.testclient import TestClient

from tests.conftest import auth, staff_token


def test_request_id_generated_when_not_provided(client: TestClient) -> None:
    resp = client.get("/health")
    req_id = resp.headers.get("x-request-id")
    assert req_id is not None
    uuid.UUID(req_id)


def test_request_id_echoed_when_provided(client: TestClient) -> None:
    resp = client.get("/health", headers={"X-Request-ID": "trace-123"})
    assert resp.headers.get("x-request-id") == "trace-123"


def test_request_id_present_on_error_responses(client: TestClient, course) -> None:
    resp = client.get(f"/enrollments/progress/{course.id}")
    assert resp.status_code == 401
    assert resp.headers.get("x-request-id") is not None


def test_log_records_carry_request_and_user(
    client: TestClient, tutor, course, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="courseflow"):
        client.post(
            f"/courses/{course.id}/materials",
            json={"title": "Intro", "orderIndex": 0},
            headers={**auth(staff_token(tutor)), "X-Request-ID": "req-42"},
        )

    added = [r for r in caplog.records if r.getMessage().startswith("Material added")]
    assert added
    assert added[0].request_id == "req-42"
    assert added[0].user_id == str(tutor.id)
