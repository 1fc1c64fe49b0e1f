"""Unit tests for problem details responses and result unwrapping."""

import pytest
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient

from worktime_tracker.api.middleware import (
    ProblemDetailsException,
    problem_details_handler,
    unwrap_result,
    validation_error_handler,
)
from worktime_tracker.core.enums import ErrorKind
from worktime_tracker.core.result import Err, Ok


@pytest.fixture
def test_client():
    """App with the problem details handlers and endpoints that fail on demand."""
    app = FastAPI()
    app.add_exception_handler(ProblemDetailsException, problem_details_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    @app.get("/results/{kind}")
    async def failing_result(kind: str):
        return unwrap_result(Err(kind=ErrorKind(kind), message=f"{kind} happened"))

    @app.get("/ok")
    async def ok_result():
        return unwrap_result(Ok({"answer": 42}))

    @app.get("/numbers/{number}")
    async def number(number: int):
        return {"number": number}

    return TestClient(app)


@pytest.mark.unit
class TestProblemDetails:
    @pytest.mark.parametrize(
        "kind,status_code,title",
        [
            ("not_found", 404, "Not Found"),
            ("no_active_session", 409, "No Active Session"),
            ("validation_error", 422, "Validation Error"),
            ("storage_error", 500, "Storage Error"),
        ],
    )
    def test_error_kind_mapping(self, test_client, kind, status_code, title):
        response = test_client.get(f"/results/{kind}")

        assert response.status_code == status_code
        assert response.headers["content-type"] == "application/problem+json"
        problem = response.json()
        assert problem["type"] == f"https://httpstatuses.com/{status_code}"
        assert problem["title"] == title
        assert problem["status"] == status_code
        assert problem["detail"] == f"{kind} happened"
        assert problem["kind"] == kind
        assert problem["instance"].endswith(f"/results/{kind}")

    def test_ok_result_passes_through(self, test_client):
        response = test_client.get("/ok")

        assert response.status_code == 200
        assert response.json() == {"answer": 42}

    def test_request_validation_error(self, test_client):
        response = test_client.get("/numbers/seven")

        assert response.status_code == 422
        problem = response.json()
        assert problem["title"] == "Validation Error"
        assert problem["kind"] == "validation_error"
        assert problem["errors"][0]["loc"] == ["path", "number"]
