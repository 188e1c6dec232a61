"""Explicit wiring of repositories and domain services.

`build_services` constructs the whole object graph once at startup; the app
keeps it on ``app.state.services`` and routes pull the service they need
through the small FastAPI dependencies below.
"""
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from fastapi import Request

from credit_system.core.config import Settings
from credit_system.core.logging import get_logger
from credit_system.infrastructure.repositories import (
    CreditRepository,
    CustomerRepository,
    InMemoryCreditRepository,
    InMemoryCustomerRepository,
)
from credit_system.services.credit import CreditService
from credit_system.services.customer import CustomerService

logger = get_logger(__name__)


@dataclass
class Services:
    customer_service: CustomerService
    credit_service: CreditService


def build_repositories(settings: Settings) -> tuple[CustomerRepository, CreditRepository]:
    """Pick the storage backend named by STORAGE_BACKEND.

    Falls back to in-memory storage when Redis is configured but unreachable.
    """
    if settings.storage_backend == "redis":
        from credit_system.infrastructure.redis import (
            RedisCreditRepository,
            RedisCustomerRepository,
            get_redis_client,
        )

        client = get_redis_client()
        if client is not None:
            customers = RedisCustomerRepository(client, key_prefix=settings.redis_key_prefix)
            credits = RedisCreditRepository(client, customers, key_prefix=settings.redis_key_prefix)
            logger.info("Using Redis storage backend")
            return customers, credits

        logger.warning("Redis unavailable, falling back to in-memory storage")

    customers = InMemoryCustomerRepository()
    return customers, InMemoryCreditRepository(customers)


def build_services(
    settings: Settings,
    customers: Optional[CustomerRepository] = None,
    credits: Optional[CreditRepository] = None,
    today: Callable[[], date] = date.today,
) -> Services:
    """Construct the domain services; explicit repositories override the configured backend."""
    if customers is None or credits is None:
        customers, credits = build_repositories(settings)

    customer_service = CustomerService(customers)
    credit_service = CreditService(
        credits,
        customer_service,
        today=today,
        window_months=settings.installment_window_months,
    )
    return Services(customer_service=customer_service, credit_service=credit_service)


def get_customer_service(request: Request) -> CustomerService:
    return request.app.state.services.customer_service


def get_credit_service(request: Request) -> CreditService:
    return request.app.state.services.credit_service
