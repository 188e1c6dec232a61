"""Domain models for customers."""
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field


class Address(BaseModel):
    """Postal address embedded in a customer record."""
    zip_code: str = ""
    street: str = ""


class Customer(BaseModel):
    """A customer who can request credits.

    Attributes:
        id: Numeric identifier, assigned by the repository on first insert
        first_name: Given name
        last_name: Family name
        cpf: National tax id, unique across customers
        email: Contact email, unique across customers
        password: Opaque credential, stored as given
        income: Declared income
        address: Embedded postal address
    """
    id: Optional[int] = None
    first_name: str
    last_name: str
    cpf: str
    email: str
    password: str
    income: Decimal = Field(default=Decimal("0"), ge=0)
    address: Address = Field(default_factory=Address)

    class Config:
        json_schema_extra = {
            "example": {
                "id": 1,
                "first_name": "Cami",
                "last_name": "Cavalcante",
                "cpf": "28475934625",
                "email": "camila@email.com",
                "password": "1234",
                "income": "1000.0",
                "address": {"zip_code": "000000", "street": "Rua da Cami, 123"}
            }
        }


def is_valid_cpf(cpf: str) -> bool:
    """Check an 11-digit CPF, including both check digits."""
    if len(cpf) != 11 or not cpf.isdigit() or len(set(cpf)) == 1:
        return False

    digits = [int(c) for c in cpf]
    for position in (9, 10):
        total = sum(d * w for d, w in zip(digits[:position], range(position + 1, 1, -1)))
        check = (total * 10) % 11 % 10
        if digits[position] != check:
            return False
    return True
