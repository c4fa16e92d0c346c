import typing as t
from pathlib import Path

import orjson
import pytest
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.test import RequestFactory
from django.test.client import Client
from django.urls import reverse

from api.exception_handlers import (
    handle_django_validation_error,
    handle_general_exception,
    handle_ticketing_error,
    obfuscate,
)
from events.exceptions import InsufficientInventoryError, NotFoundError, TicketNotAdmissibleError


def test_version_endpoint(client: Client) -> None:
    response = client.get(reverse("api:version"))

    assert response.status_code == 200
    assert response.json() == {"version": settings.VERSION}


def test_healthcheck(client: Client) -> None:
    response = client.get(reverse("api:healthcheck"))

    assert response.status_code == 200


class TestExceptionHandlers:
    @pytest.fixture
    def rf_request(self) -> t.Any:
        return RequestFactory().get("/api/anything")

    def test_validation_error_with_fields(self, rf_request: t.Any) -> None:
        response = handle_django_validation_error(rf_request, ValidationError({"quantity": ["Too many."]}))

        assert response.status_code == 400
        assert orjson.loads(response.content) == {"errors": {"quantity": ["Too many."]}}

    def test_validation_error_without_fields(self, rf_request: t.Any) -> None:
        response = handle_django_validation_error(rf_request, ValidationError("Nope."))

        assert orjson.loads(response.content) == {"errors": {"__all__": ["Nope."]}}

    @pytest.mark.parametrize(
        "exc,status_code",
        [
            (NotFoundError("Sale", "123"), 404),
            (InsufficientInventoryError(requested=3, available=1), 409),
            (TicketNotAdmissibleError(), 400),
        ],
    )
    def test_ticketing_errors(self, rf_request: t.Any, exc: Exception, status_code: int) -> None:
        response = handle_ticketing_error(rf_request, exc)  # type: ignore[arg-type]

        assert response.status_code == status_code
        assert "detail" in orjson.loads(response.content)

    def test_unexpected_error(self, rf_request: t.Any) -> None:
        rf_request.user = None

        response = handle_general_exception(rf_request, RuntimeError("boom"))

        assert response.status_code == 500
        assert orjson.loads(response.content)["detail"] == "Internal Server Error."


def test_obfuscate_hides_secrets() -> None:
    data = {"Authorization": "Bearer abc", "Stripe-Signature": "t=1,v1=abc", "quantity": 2}

    result = obfuscate(data)

    assert result == {"Authorization": "********", "Stripe-Signature": "********", "quantity": 2}
    assert data["Authorization"] == "Bearer abc"


def test_dump_openapi(tmp_path: Path) -> None:
    output = tmp_path / "openapi.json"

    call_command("dump_openapi", output=output)

    schema = orjson.loads(output.read_bytes())
    assert schema["info"]["title"] == "Boxoffice API"
    assert any(path.endswith("/sales/reserve") for path in schema["paths"])
