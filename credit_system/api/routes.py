"""FastAPI routes for customers and credits.

Handlers only parse the request, call a domain service and render a view.
Errors propagate to `credit_system.api.exception_handlers`.
"""
import uuid
from typing import List

from fastapi import APIRouter, Depends, Query, Response, status

from credit_system.api.dependencies import get_credit_service, get_customer_service
from credit_system.api.schemas import (
    CreditDto,
    CreditView,
    CreditViewList,
    CustomerDto,
    CustomerUpdateDto,
    CustomerView,
)
from credit_system.core.logging import get_logger, LogTimer
from credit_system.services.credit import CreditService
from credit_system.services.customer import CustomerService

logger = get_logger(__name__)

customers_router = APIRouter(prefix="/customers", tags=["Customers"])
credits_router = APIRouter(prefix="/credits", tags=["Credits"])


# -----------------
# CUSTOMER ENDPOINTS
# -----------------

@customers_router.post("", response_model=CustomerView, status_code=status.HTTP_201_CREATED)
def save_customer(
    customer_dto: CustomerDto,
    customer_service: CustomerService = Depends(get_customer_service),
):
    """Register a new customer.

    Example:
        POST /api/customers
        {"firstName": "Cami", "lastName": "Cavalcante", "cpf": "28475934625",
         "email": "camila@email.com", "income": 1000.0, "password": "1234",
         "zipCode": "000000", "street": "Rua da Cami, 123"}
    """
    with LogTimer(logger, "save_customer"):
        saved = customer_service.save(customer_dto.to_entity())
        return CustomerView.from_entity(saved)


@customers_router.get("/{customer_id}", response_model=CustomerView)
def find_customer(
    customer_id: int,
    customer_service: CustomerService = Depends(get_customer_service),
):
    with LogTimer(logger, f"find_customer:{customer_id}"):
        return CustomerView.from_entity(customer_service.find_by_id(customer_id))


@customers_router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(
    customer_id: int,
    customer_service: CustomerService = Depends(get_customer_service),
):
    """Delete a customer. Credits that reference it are left untouched."""
    with LogTimer(logger, f"delete_customer:{customer_id}"):
        customer_service.delete(customer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@customers_router.patch("", response_model=CustomerView)
def update_customer(
    customer_update: CustomerUpdateDto,
    customer_id: int = Query(alias="customerId"),
    customer_service: CustomerService = Depends(get_customer_service),
):
    """Merge the supplied fields onto an existing customer."""
    with LogTimer(logger, f"update_customer:{customer_id}"):
        updated = customer_service.update(customer_id, customer_update.changes())
        return CustomerView.from_entity(updated)


# -----------------
# CREDIT ENDPOINTS
# -----------------

@credits_router.post("", response_model=CreditView, status_code=status.HTTP_201_CREATED)
def save_credit(
    credit_dto: CreditDto,
    credit_service: CreditService = Depends(get_credit_service),
):
    """Create a credit request for an existing customer.

    Example:
        POST /api/credits
        {"creditValue": 7500.0, "dayFirstOfInstallment": "2024-11-20",
         "numberOfInstallments": 6, "customerId": 1}
    """
    with LogTimer(logger, "save_credit"):
        credit = credit_service.save(credit_dto.to_entity())
        return CreditView.from_entity(credit)


@credits_router.get("", response_model=List[CreditViewList])
def find_all_credits_by_customer(
    customer_id: int = Query(alias="customerId"),
    credit_service: CreditService = Depends(get_credit_service),
):
    with LogTimer(logger, f"find_all_credits:{customer_id}"):
        credits = credit_service.find_all_by_customer(customer_id)
        return [CreditViewList.from_entity(credit) for credit in credits]


@credits_router.get("/{credit_code}", response_model=CreditView)
def find_credit_by_code(
    credit_code: uuid.UUID,
    customer_id: int = Query(alias="customerId"),
    credit_service: CreditService = Depends(get_credit_service),
):
    """Return one credit, provided it belongs to `customerId`."""
    with LogTimer(logger, f"find_credit:{credit_code}"):
        credit = credit_service.find_by_credit_code(customer_id, credit_code)
        return CreditView.from_entity(credit)
