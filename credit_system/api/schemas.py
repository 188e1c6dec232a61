"""Request DTOs and response views for the HTTP API.

JSON uses camelCase field names; request bodies accept snake_case too.
"""
import uuid
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, FutureDate, field_validator

from credit_system.core.config import settings
from credit_system.domain.credit import Credit, Status
from credit_system.domain.customer import Address, Customer, is_valid_cpf

INVALID_INPUT = "Invalid input"


def _not_blank(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError(INVALID_INPUT)
    return value


class CustomerDto(BaseModel):
    """Body of POST /api/customers."""
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    cpf: str
    email: EmailStr
    password: str
    income: Decimal = Field(ge=0)
    zip_code: str = Field(alias="zipCode")
    street: str

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "firstName": "Cami",
                "lastName": "Cavalcante",
                "cpf": "28475934625",
                "email": "camila@email.com",
                "income": 1000.0,
                "password": "1234",
                "zipCode": "000000",
                "street": "Rua da Cami, 123"
            }
        }

    @field_validator("first_name", "last_name", "password", "zip_code", "street")
    @classmethod
    def check_not_blank(cls, value: str) -> str:
        return _not_blank(value)

    @field_validator("cpf")
    @classmethod
    def check_cpf(cls, value: str) -> str:
        if not is_valid_cpf(value):
            raise ValueError("This invalid CPF")
        return value

    def to_entity(self) -> Customer:
        return Customer(
            first_name=self.first_name,
            last_name=self.last_name,
            cpf=self.cpf,
            email=self.email,
            password=self.password,
            income=self.income,
            address=Address(zip_code=self.zip_code, street=self.street),
        )


class CustomerUpdateDto(BaseModel):
    """Body of PATCH /api/customers; every field is optional."""
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    income: Optional[Decimal] = Field(default=None, ge=0)
    zip_code: Optional[str] = Field(default=None, alias="zipCode")
    street: Optional[str] = None

    class Config:
        populate_by_name = True

    @field_validator("first_name", "last_name", "zip_code", "street")
    @classmethod
    def check_not_blank(cls, value: Optional[str]) -> Optional[str]:
        return _not_blank(value)

    def changes(self) -> dict:
        return self.model_dump(exclude_none=True)


class CustomerView(BaseModel):
    """Customer as returned by the API (no password)."""
    id: Optional[int]
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    cpf: str
    income: float
    email: str
    zip_code: str = Field(alias="zipCode")
    street: str

    class Config:
        populate_by_name = True

    @classmethod
    def from_entity(cls, customer: Customer) -> "CustomerView":
        return cls(
            id=customer.id,
            first_name=customer.first_name,
            last_name=customer.last_name,
            cpf=customer.cpf,
            income=float(customer.income),
            email=customer.email,
            zip_code=customer.address.zip_code,
            street=customer.address.street,
        )


class CreditDto(BaseModel):
    """Body of POST /api/credits."""
    credit_value: Decimal = Field(gt=0, alias="creditValue")
    day_first_of_installment: FutureDate = Field(alias="dayFirstOfInstallment")
    number_of_installments: int = Field(ge=1, alias="numberOfInstallments")
    customer_id: int = Field(alias="customerId")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "creditValue": 7500.0,
                "dayFirstOfInstallment": "2024-11-20",
                "numberOfInstallments": 6,
                "customerId": 1
            }
        }

    @field_validator("number_of_installments")
    @classmethod
    def check_max_installments(cls, value: int) -> int:
        if value > settings.max_installments:
            raise ValueError(f"Number of installments must be at most {settings.max_installments}")
        return value

    def to_entity(self) -> Credit:
        return Credit(
            credit_value=self.credit_value,
            day_first_installment=self.day_first_of_installment,
            number_of_installments=self.number_of_installments,
            customer_id=self.customer_id,
        )


class CreditView(BaseModel):
    """Full credit view, including the owner's contact data."""
    credit_code: uuid.UUID = Field(alias="creditCode")
    credit_value: float = Field(alias="creditValue")
    number_of_installment: int = Field(alias="numberOfInstallment")
    status: Status
    email_customer: Optional[str] = Field(alias="emailCustomer")
    income_customer: Optional[float] = Field(alias="incomeCustomer")

    class Config:
        populate_by_name = True

    @classmethod
    def from_entity(cls, credit: Credit) -> "CreditView":
        customer = credit.customer
        return cls(
            credit_code=credit.credit_code,
            credit_value=float(credit.credit_value),
            number_of_installment=credit.number_of_installments,
            status=credit.status,
            email_customer=customer.email if customer else None,
            income_customer=float(customer.income) if customer else None,
        )


class CreditViewList(BaseModel):
    """Summary row of GET /api/credits."""
    credit_code: uuid.UUID = Field(alias="creditCode")
    credit_value: float = Field(alias="creditValue")
    number_of_installments: int = Field(alias="numberOfInstallments")
    status: Status

    class Config:
        populate_by_name = True

    @classmethod
    def from_entity(cls, credit: Credit) -> "CreditViewList":
        return cls(
            credit_code=credit.credit_code,
            credit_value=float(credit.credit_value),
            number_of_installments=credit.number_of_installments,
            status=credit.status,
        )
