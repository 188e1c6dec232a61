"""Pytest configuration and shared fixtures."""
import os

os.environ.setdefault("ENVIRONMENT", "test")

import uuid
from datetime import date, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from credit_system.core.config import Settings
from credit_system.domain.credit import Credit, Status
from credit_system.domain.customer import Address, Customer
from credit_system.infrastructure.repositories import InMemoryCreditRepository, InMemoryCustomerRepository
from credit_system.services.credit import CreditService
from credit_system.services.customer import CustomerService

FROZEN_TODAY = date(2024, 1, 31)


def build_customer(
    first_name: str = "Cami",
    last_name: str = "Cavalcante",
    cpf: str = "28475934625",
    email: str = "camila@email.com",
    password: str = "1234",
    zip_code: str = "000000",
    street: str = "Rua da Cami, 123",
    income: Decimal = Decimal("1000.0"),
    id: int = None,
) -> Customer:
    return Customer(
        id=id,
        first_name=first_name,
        last_name=last_name,
        cpf=cpf,
        email=email,
        password=password,
        income=income,
        address=Address(zip_code=zip_code, street=street),
    )


def build_credit(
    customer: Customer = None,
    credit_code: uuid.UUID = None,
    credit_value: Decimal = Decimal("15000.00"),
    day_first_installment: date = None,
    number_of_installments: int = 12,
    status: Status = Status.IN_PROGRESS,
    today: date = FROZEN_TODAY,
) -> Credit:
    return Credit(
        credit_code=credit_code or uuid.uuid4(),
        credit_value=credit_value,
        day_first_installment=day_first_installment or today + timedelta(days=30),
        number_of_installments=number_of_installments,
        status=status,
        customer=customer if customer is not None else build_customer(id=1),
    )


def credit_payload(customer_id: int, **overrides) -> dict:
    payload = {
        "creditValue": 7500.0,
        "dayFirstOfInstallment": (date.today() + timedelta(days=30)).isoformat(),
        "numberOfInstallments": 6,
        "customerId": customer_id,
    }
    payload.update(overrides)
    return payload


def customer_payload(**overrides) -> dict:
    payload = {
        "firstName": "Cami",
        "lastName": "Cavalcante",
        "cpf": "28475934625",
        "email": "camila@email.com",
        "income": 1000.0,
        "password": "1234",
        "zipCode": "000000",
        "street": "Rua da Cami, 123",
    }
    payload.update(overrides)
    return payload


class FakeRedis:
    """Dict-backed stand-in for the handful of Redis commands the repositories use."""

    def __init__(self):
        self.data = {}

    def ping(self):
        return True

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, nx=False):
        if nx and key in self.data:
            return None
        self.data[key] = str(value)
        return True

    def delete(self, *keys):
        return sum(1 for key in keys if self.data.pop(key, None) is not None)

    def incr(self, key):
        self.data[key] = str(int(self.data.get(key, 0)) + 1)
        return int(self.data[key])

    def rpush(self, key, *values):
        self.data.setdefault(key, []).extend(values)
        return len(self.data[key])

    def lrange(self, key, start, end):
        items = self.data.get(key, [])
        return items[start:] if end == -1 else items[start:end + 1]


@pytest.fixture
def customer_repository():
    return InMemoryCustomerRepository()


@pytest.fixture
def credit_repository(customer_repository):
    return InMemoryCreditRepository(customer_repository)


@pytest.fixture
def customer_service(customer_repository):
    return CustomerService(customer_repository)


@pytest.fixture
def credit_service(credit_repository, customer_service):
    return CreditService(credit_repository, customer_service, today=lambda: FROZEN_TODAY, window_months=3)


@pytest.fixture
def saved_customer(customer_service):
    return customer_service.save(build_customer())


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def test_settings():
    return Settings(ENVIRONMENT="test", STORAGE_BACKEND="memory")


@pytest.fixture
def test_client(test_settings):
    """FastAPI test client over fresh in-memory storage."""
    from main import create_app
    from credit_system.api.dependencies import build_services

    customers = InMemoryCustomerRepository()
    services = build_services(test_settings, customers, InMemoryCreditRepository(customers))
    return TestClient(create_app(settings=test_settings, services=services))
