"""Domain models for credit requests."""
import calendar
import uuid
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from credit_system.domain.customer import Customer


class Status(str, Enum):
    """Lifecycle status of a credit request. New credits start IN_PROGRESS."""
    IN_PROGRESS = "IN_PROGRESS"
    APPROVED = "APPROVED"
    REJECT = "REJECT"


class Credit(BaseModel):
    """A credit request owned by exactly one customer.

    `credit_code` is the identifier exposed to clients; `id` stays internal.
    `customer_id` is the stored reference, `customer` the resolved record
    (None when it has not been loaded or no longer exists).
    """
    id: Optional[int] = None
    credit_code: uuid.UUID = Field(default_factory=uuid.uuid4)
    credit_value: Decimal = Field(gt=0)
    day_first_installment: date
    number_of_installments: int = Field(ge=1)
    status: Status = Status.IN_PROGRESS
    customer_id: Optional[int] = None
    customer: Optional[Customer] = None

    @model_validator(mode="after")
    def sync_customer_id(self):
        if self.customer_id is None and self.customer is not None:
            self.customer_id = self.customer.id
        return self


def add_months(day: date, months: int) -> date:
    """Shift `day` by whole calendar months, clamping to the month's last day.

    >>> add_months(date(2024, 1, 31), 1)
    datetime.date(2024, 2, 29)
    """
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def is_within_installment_window(day_first_installment: date, today: date, months: int = 3) -> bool:
    """True when the first installment falls strictly before `today` + `months`."""
    return add_months(today, months) > day_first_installment
