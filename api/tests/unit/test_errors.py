"""Tests for error handling and Problem Details implementation."""

import json

import pytest
from fastapi import Request
from fastapi.responses import JSONResponse
from unittest.mock import Mock

from chatfeed.errors.problem_details import (
    ProblemDetail,
    ProblemDetailException,
    BadRequestError,
    NotFoundError,
    ConflictError,
    InternalServerError,
    ServiceUnavailableError,
    InvalidArgumentError,
    InvalidCursorError,
    BusyError,
    InvariantViolationError,
    UnavailableError,
    create_problem_response
)


class TestProblemDetail:
    """Test ProblemDetail model."""

    def test_problem_detail_defaults(self):
        """Test ProblemDetail with default values."""
        problem = ProblemDetail(title="Test Error", status=400)

        assert problem.type == "about:blank"
        assert problem.title == "Test Error"
        assert problem.status == 400
        assert problem.detail is None
        assert problem.instance is None

    def test_problem_detail_extra_fields(self):
        """Test ProblemDetail allows extension members."""
        problem = ProblemDetail(title="Test Error", status=400, code="invalid_cursor")

        assert problem.code == "invalid_cursor"


class TestProblemDetailException:
    """Test ProblemDetailException base class."""

    def test_basic_exception(self):
        exc = ProblemDetailException(status=400, title="Test Error", detail="Test detail")

        assert exc.status == 400
        assert exc.title == "Test Error"
        assert exc.detail == "Test detail"
        assert exc.type_uri == "about:blank"
        assert exc.instance is None
        assert exc.code is None
        assert str(exc) == "Test detail"

    def test_to_problem_detail_with_request(self):
        """Test converting to ProblemDetail with request."""
        request = Mock(spec=Request)
        request.url.path = "/v1/conversations"

        problem = ProblemDetailException(status=400, title="Test Error").to_problem_detail(request)

        assert problem.instance == "/v1/conversations"

    def test_to_response_carries_code(self):
        """Test converting to JSONResponse."""
        response = InvalidCursorError().to_response()
        body = json.loads(response.body)

        assert isinstance(response, JSONResponse)
        assert response.status_code == 400
        assert response.headers["Content-Type"] == "application/problem+json"
        assert body["code"] == "invalid_cursor"
        assert body["detail"] == "Invalid cursor"
        assert "instance" not in body


class TestDomainErrors:
    """Each domain error has a fixed status and machine-readable code."""

    @pytest.mark.parametrize("exc, base, status, code", [
        (NotFoundError(), NotFoundError, 404, "not_found"),
        (InvalidArgumentError("bad count"), BadRequestError, 400, "invalid_argument"),
        (InvalidCursorError(), BadRequestError, 400, "invalid_cursor"),
        (BusyError(), ConflictError, 409, "busy"),
        (InvariantViolationError("out of order"), InternalServerError, 500, "invariant_violation"),
        (UnavailableError(), ServiceUnavailableError, 503, "unavailable"),
    ])
    def test_status_and_code(self, exc, base, status, code):
        assert isinstance(exc, base)
        assert exc.status == status
        assert exc.code == code

    def test_code_can_be_overridden(self):
        assert NotFoundError("gone", code="conversation_not_found").code == "conversation_not_found"

    def test_default_details(self):
        assert NotFoundError().detail == "Resource not found"
        assert BusyError().detail == "Another fetch is already in flight"
        assert UnavailableError().detail == "Message store unavailable"
        assert ServiceUnavailableError().detail == "Service temporarily unavailable"


class TestCreateProblemResponse:
    """Test create_problem_response function."""

    def test_create_problem_response_with_request(self):
        request = Mock(spec=Request)
        request.url.path = "/test/path"

        response = create_problem_response(status=409, title="Conflict", request=request, code="busy")
        body = json.loads(response.body)

        assert response.status_code == 409
        assert body["instance"] == "/test/path"
        assert body["code"] == "busy"
