"""API tests for registration submission and inline validation."""

from __future__ import annotations

from fastapi.testclient import TestClient

from inscription.core.exceptions import RegistrationError
from tests.conftest import InMemoryClubBackend, valid_values

REGISTRATIONS_URL = "/api/v1/registrations/"


class TestCreateRegistration:
    def test_created(self, client: TestClient, backend: InMemoryClubBackend) -> None:
        response = client.post(REGISTRATIONS_URL, json=valid_values())

        body = response.json()
        assert response.status_code == 201
        assert body["success"] is True
        assert body["message"] == "Inscription enregistrée avec succès !"
        assert body["replayed"] is False
        assert body["member"]["birth_date"] == "1990-06-15"
        assert body["member"]["gender"] == "female"
        assert body["subscription"]["plan_id"] == 3
        assert body["subscription"]["payment_status"] == "pending"
        assert response.headers["Cache-Control"] == "no-store"
        assert len(backend.members) == 1

    def test_integer_ids_accepted(self, client: TestClient) -> None:
        response = client.post(
            REGISTRATIONS_URL, json=valid_values(discipline_id=1, plan_id=3)
        )

        assert response.status_code == 201

    def test_field_errors(self, client: TestClient, backend: InMemoryClubBackend) -> None:
        response = client.post(
            REGISTRATIONS_URL, json=valid_values(first_name="J", email="nope")
        )

        body = response.json()
        assert response.status_code == 422
        assert body["error"] == "VALIDATION_ERROR"
        messages = {f["field"]: f["message"] for f in body["details"]["fields"]}
        assert messages == {
            "first_name": "Le prénom doit contenir au moins 2 caractères",
            "email": "Adresse email invalide",
        }
        assert body["details"]["errors"] == messages
        assert backend.members == {}

    def test_ineligible_plan(self, client: TestClient, backend: InMemoryClubBackend) -> None:
        response = client.post(REGISTRATIONS_URL, json=valid_values(plan_id="1"))

        body = response.json()
        assert response.status_code == 422
        assert body["error"] == "REGISTRATION_ERROR"
        assert body["message"] == RegistrationError.DEFAULT_MESSAGE
        assert body["details"]["reason"] == "plan_not_eligible"
        assert backend.members == {}

    def test_unknown_plan(self, client: TestClient) -> None:
        response = client.post(REGISTRATIONS_URL, json=valid_values(plan_id="42"))

        assert response.status_code == 404
        assert response.json()["details"]["reason"] == "plan_not_found"

    def test_storage_failure(self, client: TestClient, backend: InMemoryClubBackend) -> None:
        backend.fail_subscription_insert = True

        response = client.post(REGISTRATIONS_URL, json=valid_values())

        assert response.status_code == 500
        assert response.json()["message"] == RegistrationError.DEFAULT_MESSAGE
        assert backend.members == {}


class TestIdempotencyKey:
    def test_retry_returns_first_registration(
        self, client: TestClient, backend: InMemoryClubBackend
    ) -> None:
        headers = {"Idempotency-Key": "form-7f3a"}

        first = client.post(REGISTRATIONS_URL, json=valid_values(), headers=headers)
        second = client.post(REGISTRATIONS_URL, json=valid_values(), headers=headers)

        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["replayed"] is True
        assert second.json()["member"]["id"] == first.json()["member"]["id"]
        assert len(backend.members) == 1

    def test_blank_key_is_ignored(
        self, client: TestClient, backend: InMemoryClubBackend
    ) -> None:
        headers = {"Idempotency-Key": "  "}

        client.post(REGISTRATIONS_URL, json=valid_values(), headers=headers)
        client.post(REGISTRATIONS_URL, json=valid_values(), headers=headers)

        assert len(backend.members) == 2

    def test_key_too_long(self, client: TestClient) -> None:
        response = client.post(
            REGISTRATIONS_URL,
            json=valid_values(),
            headers={"Idempotency-Key": "k" * 101},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"


class TestValidateFields:
    def test_reports_failing_fields(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/registrations/validate",
            json={"first_name": "J", "phone": "0612345678", "nickname": "x"},
        )

        assert response.status_code == 200
        assert response.json() == {
            "valid": False,
            "errors": {"first_name": "Le prénom doit contenir au moins 2 caractères"},
        }

    def test_valid_fields(self, client: TestClient) -> None:
        response = client.post("/api/v1/registrations/validate", json=valid_values())

        assert response.json() == {"valid": True, "errors": {}}


class TestValidationPathsAgree:
    """The inline check and the submission apply the same rules to the same text."""

    def test_padded_phone_rejected_by_both(
        self, client: TestClient, backend: InMemoryClubBackend
    ) -> None:
        values = valid_values(phone="0612345678 ")

        inline = client.post("/api/v1/registrations/validate", json=values)
        submitted = client.post(REGISTRATIONS_URL, json=values)

        assert inline.json()["errors"] == {
            "phone": "Le numéro de téléphone doit contenir 10 chiffres"
        }
        assert submitted.status_code == 422
        assert submitted.json()["details"]["errors"] == inline.json()["errors"]
        assert backend.members == {}

    def test_long_name_rejected_by_both(self, client: TestClient) -> None:
        values = valid_values(first_name="A" * 101)

        inline = client.post("/api/v1/registrations/validate", json=values)
        submitted = client.post(REGISTRATIONS_URL, json=values)

        message = "Le prénom ne doit pas dépasser 100 caractères"
        assert inline.json()["errors"] == {"first_name": message}
        assert submitted.json()["details"]["errors"] == {"first_name": message}

    def test_non_numeric_plan_rejected_by_both(self, client: TestClient) -> None:
        values = valid_values(plan_id="abc")

        inline = client.post("/api/v1/registrations/validate", json=values)
        submitted = client.post(REGISTRATIONS_URL, json=values)

        message = "Veuillez sélectionner une formule d'abonnement"
        assert inline.json()["errors"] == {"plan_id": message}
        assert submitted.status_code == 422
        assert submitted.json()["details"]["errors"] == {"plan_id": message}
