"""Tests for exception handlers."""

import json

import pytest
from unittest.mock import Mock
from fastapi import Request, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from chatfeed.errors.handlers import (
    problem_detail_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    pydantic_validation_exception_handler,
    general_exception_handler
)
from chatfeed.errors.problem_details import InvalidCursorError, UnavailableError


class TestExceptionHandlers:
    """Test exception handlers."""

    @pytest.fixture
    def mock_request(self):
        """Create mock request."""
        request = Mock(spec=Request)
        request.url.path = "/v1/conversations/abc/messages"
        request.method = "GET"
        return request

    @pytest.mark.asyncio
    async def test_problem_detail_exception_handler(self, mock_request):
        response = await problem_detail_exception_handler(mock_request, InvalidCursorError())
        body = json.loads(response.body)

        assert response.status_code == 400
        assert response.headers["Content-Type"] == "application/problem+json"
        assert body["code"] == "invalid_cursor"
        assert body["instance"] == "/v1/conversations/abc/messages"

    @pytest.mark.asyncio
    async def test_server_side_problem(self, mock_request):
        response = await problem_detail_exception_handler(mock_request, UnavailableError("Database error"))

        assert response.status_code == 503
        assert json.loads(response.body)["code"] == "unavailable"

    @pytest.mark.asyncio
    async def test_http_exception_handler_fastapi(self, mock_request):
        response = await http_exception_handler(mock_request, HTTPException(status_code=404, detail="Not found"))

        assert response.status_code == 404
        assert json.loads(response.body)["title"] == "Not Found"

    @pytest.mark.asyncio
    async def test_http_exception_handler_starlette(self, mock_request):
        exc = StarletteHTTPException(status_code=405, detail="Method Not Allowed")

        response = await http_exception_handler(mock_request, exc)

        assert response.status_code == 405
        assert response.headers["Content-Type"] == "application/problem+json"

    @pytest.mark.asyncio
    async def test_http_exception_handler_with_headers(self, mock_request):
        exc = HTTPException(status_code=503, detail="Down", headers={"Retry-After": "30"})

        response = await http_exception_handler(mock_request, exc)

        assert response.headers["Retry-After"] == "30"

    @pytest.mark.asyncio
    async def test_validation_exception_handler(self, mock_request):
        errors = [
            {"loc": ("query", "first"), "msg": "Input should be a valid integer", "type": "int_parsing"},
            {"loc": ("path", "conversation_id"), "msg": "Input should be a valid UUID", "type": "uuid_parsing"}
        ]

        response = await validation_exception_handler(mock_request, RequestValidationError(errors))
        body = json.loads(response.body)

        assert response.status_code == 422
        assert "query -> first" in body["detail"]
        assert body["validation_errors"][1]["loc"] == ["path", "conversation_id"]

    @pytest.mark.asyncio
    async def test_pydantic_validation_exception_handler(self, mock_request):
        class Sample(BaseModel):
            count: int = Field(..., gt=0)

        with pytest.raises(ValidationError) as exc_info:
            Sample(count=-1)

        response = await pydantic_validation_exception_handler(mock_request, exc_info.value)

        assert response.status_code == 400
        assert response.headers["Content-Type"] == "application/problem+json"

    @pytest.mark.asyncio
    async def test_general_exception_handler_hides_details(self, mock_request):
        response = await general_exception_handler(mock_request, RuntimeError("secret internals"))
        body = json.loads(response.body)

        assert response.status_code == 500
        assert "secret internals" not in body["detail"]
