"""Integration tests for API routes."""
import uuid
from datetime import date, timedelta

import pytest
from fastapi import status

from conftest import credit_payload, customer_payload
from credit_system.domain.credit import add_months

CUSTOMERS_URL = "/api/customers"
CREDITS_URL = "/api/credits"


@pytest.fixture
def customer(test_client):
    response = test_client.post(CUSTOMERS_URL, json=customer_payload())
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


@pytest.fixture
def another_customer(test_client):
    response = test_client.post(
        CUSTOMERS_URL,
        json=customer_payload(
            firstName="Mazaac", lastName="Waroy", email="waroy19348@oprevolt.com", cpf="22928122079"
        ),
    )
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


def assert_error_body(data: dict, status_code: int, title: str, exception: str):
    assert data["title"] == title
    assert data["timestamp"]
    assert data["status"] == status_code
    assert data["exception"] == exception
    assert data["details"]


class TestCustomerRoutes:
    """Test customer endpoints."""

    def test_create_customer(self, customer):
        assert customer["id"] is not None
        assert customer["firstName"] == "Cami"
        assert customer["lastName"] == "Cavalcante"
        assert customer["cpf"] == "28475934625"
        assert customer["email"] == "camila@email.com"
        assert customer["income"] == 1000.0
        assert customer["zipCode"] == "000000"
        assert customer["street"] == "Rua da Cami, 123"
        assert "password" not in customer

    def test_create_customer_with_duplicate_cpf_returns_409(self, test_client, customer):
        response = test_client.post(CUSTOMERS_URL, json=customer_payload(email="other@email.com"))

        assert response.status_code == status.HTTP_409_CONFLICT
        assert_error_body(
            response.json(), 409, "Conflict exception! Consult the documentation",
            "credit_system.core.exceptions.PersistenceConflict",
        )

    def test_create_customer_with_invalid_fields_returns_400(self, test_client):
        response = test_client.post(
            CUSTOMERS_URL,
            json=customer_payload(firstName="", cpf="12345678900", email="not-an-email"),
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        data = response.json()
        assert_error_body(
            data, 400, "Bad Request! Consult the documentation",
            "fastapi.exceptions.RequestValidationError",
        )
        assert set(data["details"]) == {"firstName", "cpf", "email"}
        assert data["details"]["firstName"] == "Invalid input"
        assert data["details"]["cpf"] == "This invalid CPF"

    def test_find_customer(self, test_client, customer):
        response = test_client.get(f"{CUSTOMERS_URL}/{customer['id']}")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == customer

    def test_find_unknown_customer_returns_400(self, test_client):
        response = test_client.get(f"{CUSTOMERS_URL}/999")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        data = response.json()
        assert data["exception"] == "credit_system.core.exceptions.BusinessException"
        assert data["details"] == {"None": "ID 999 not found"}

    def test_delete_customer(self, test_client, customer):
        response = test_client.delete(f"{CUSTOMERS_URL}/{customer['id']}")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert test_client.get(f"{CUSTOMERS_URL}/{customer['id']}").status_code == status.HTTP_400_BAD_REQUEST

    def test_delete_unknown_customer_returns_400(self, test_client):
        response = test_client.delete(f"{CUSTOMERS_URL}/321")
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_update_customer(self, test_client, customer):
        response = test_client.patch(
            CUSTOMERS_URL,
            params={"customerId": customer["id"]},
            json={"firstName": "Camila", "income": 5000.0, "zipCode": "45656"},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["firstName"] == "Camila"
        assert data["income"] == 5000.0
        assert data["zipCode"] == "45656"
        assert data["lastName"] == customer["lastName"]
        assert data["street"] == customer["street"]

    def test_update_requires_customer_id(self, test_client):
        response = test_client.patch(CUSTOMERS_URL, json={"firstName": "Camila"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "customerId" in response.json()["details"]

    def test_update_rejects_negative_income(self, test_client, customer):
        response = test_client.patch(CUSTOMERS_URL, params={"customerId": customer["id"]}, json={"income": -1})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "income" in response.json()["details"]


class TestCreditRoutes:
    """Test credit endpoints."""

    def test_create_credit(self, test_client, customer):
        response = test_client.post(CREDITS_URL, json=credit_payload(customer["id"]))

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert uuid.UUID(data["creditCode"])
        assert data["creditValue"] == 7500.0
        assert data["numberOfInstallment"] == 6
        assert data["status"] == "IN_PROGRESS"
        assert data["emailCustomer"] == "camila@email.com"
        assert data["incomeCustomer"] == 1000.0

    def test_invalid_day_first_installment_returns_400(self, test_client, customer):
        day = add_months(date.today(), 3) + timedelta(days=1)
        response = test_client.post(
            CREDITS_URL, json=credit_payload(customer["id"], dayFirstOfInstallment=day.isoformat())
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        data = response.json()
        assert_error_body(
            data, 400, "Bad Request! Consult the documentation",
            "credit_system.core.exceptions.BusinessException",
        )
        assert list(data["details"].values()) == ["Invalid Date"]

    def test_past_day_first_installment_fails_validation(self, test_client, customer):
        day = date.today() - timedelta(days=1)
        response = test_client.post(
            CREDITS_URL, json=credit_payload(customer["id"], dayFirstOfInstallment=day.isoformat())
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "dayFirstOfInstallment" in response.json()["details"]

    def test_too_many_installments_fails_validation(self, test_client, customer):
        response = test_client.post(CREDITS_URL, json=credit_payload(customer["id"], numberOfInstallments=49))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "numberOfInstallments" in response.json()["details"]

    def test_nonexistent_customer_returns_400(self, test_client):
        response = test_client.post(CREDITS_URL, json=credit_payload(987654))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        data = response.json()
        assert_error_body(
            data, 400, "Bad Request! Consult the documentation",
            "credit_system.core.exceptions.BusinessException",
        )
        assert list(data["details"].values()) == ["ID 987654 not found"]

    def test_list_credits_of_customer(self, test_client, customer):
        created = [
            test_client.post(CREDITS_URL, json=credit_payload(customer["id"], creditValue=value)).json()
            for value in (3000.0, 5000.0, 23200.0)
        ]

        response = test_client.get(CREDITS_URL, params={"customerId": customer["id"]})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert [item["creditCode"] for item in data] == [c["creditCode"] for c in created]
        assert [item["creditValue"] for item in data] == [3000.0, 5000.0, 23200.0]
        assert all(item["numberOfInstallments"] == 6 for item in data)
        assert all(item["status"] == "IN_PROGRESS" for item in data)

    def test_list_credits_is_empty_without_credits(self, test_client, customer):
        response = test_client.get(CREDITS_URL, params={"customerId": customer["id"]})

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == []

    def test_list_credits_excludes_other_customers(self, test_client, customer, another_customer):
        test_client.post(CREDITS_URL, json=credit_payload(another_customer["id"]))

        response = test_client.get(CREDITS_URL, params={"customerId": customer["id"]})

        assert response.json() == []

    def test_find_credit_by_code(self, test_client, customer):
        credit = test_client.post(CREDITS_URL, json=credit_payload(customer["id"])).json()

        response = test_client.get(f"{CREDITS_URL}/{credit['creditCode']}", params={"customerId": customer["id"]})

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == credit

    def test_unknown_credit_code_returns_400(self, test_client, customer):
        code = uuid.uuid4()

        response = test_client.get(f"{CREDITS_URL}/{code}", params={"customerId": customer["id"]})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        data = response.json()
        assert_error_body(
            data, 400, "Bad Request! Consult the documentation",
            "credit_system.core.exceptions.BusinessException",
        )
        assert list(data["details"].values()) == [f"Creditcode {code} not found"]

    def test_other_customers_credit_returns_500(self, test_client, customer, another_customer):
        credit = test_client.post(CREDITS_URL, json=credit_payload(customer["id"])).json()

        response = test_client.get(
            f"{CREDITS_URL}/{credit['creditCode']}", params={"customerId": another_customer["id"]}
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        data = response.json()
        assert_error_body(
            data, 500, "INTERNAL SERVER ERROR! Contact admin",
            "credit_system.core.exceptions.ContactAdminError",
        )
        assert list(data["details"].values()) == ["Contact admin"]
        assert "creditCode" not in data

    def test_malformed_credit_code_returns_400(self, test_client, customer):
        response = test_client.get(f"{CREDITS_URL}/not-a-uuid", params={"customerId": customer["id"]})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "credit_code" in response.json()["details"]


class TestServiceRoutes:
    """Root and health endpoints."""

    def test_health(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "healthy"

    def test_request_id_header(self, test_client):
        response = test_client.get("/")

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["X-Request-ID"]
