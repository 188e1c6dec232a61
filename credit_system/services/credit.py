"""Credit domain service.

Credits are only ever created here: the first-installment window is checked
before anything touches storage, and the owning customer is resolved through
`CustomerService` so an unknown customer fails with its usual
``ID <id> not found`` error. Reads by credit code enforce ownership.
"""
import uuid
from datetime import date
from typing import Callable, List, Optional

from credit_system.core.config import settings
from credit_system.core.exceptions import BusinessException, ContactAdminError
from credit_system.core.logging import get_logger
from credit_system.domain.credit import Credit, is_within_installment_window
from credit_system.infrastructure.repositories import CreditRepository
from credit_system.services.customer import CustomerService

logger = get_logger(__name__)


class CreditService:
    """Business operations on credits.

    Args:
        repository: Credit storage
        customer_service: Used to resolve the owning customer
        today: Clock returning the current date (swappable in tests)
        window_months: Width of the first-installment window
    """

    def __init__(
        self,
        repository: CreditRepository,
        customer_service: CustomerService,
        today: Callable[[], date] = date.today,
        window_months: Optional[int] = None,
    ):
        self.repository = repository
        self.customer_service = customer_service
        self.today = today
        self.window_months = window_months or settings.installment_window_months

    def save(self, credit: Credit) -> Credit:
        self.validate_day_first_installment(credit.day_first_installment)

        customer_id = credit.customer_id
        credit.customer = self.customer_service.find_by_id(customer_id)

        saved = self.repository.save(credit)
        logger.info(
            f"Credit {saved.credit_code} created for customer {customer_id}",
            extra={"credit_code": str(saved.credit_code), "customer_id": customer_id}
        )
        return saved

    def find_all_by_customer(self, customer_id: int) -> List[Credit]:
        return self.repository.find_all_by_customer(customer_id)

    def find_by_credit_code(self, customer_id: int, credit_code: uuid.UUID) -> Credit:
        credit = self.repository.find_by_credit_code(credit_code)
        if credit is None:
            raise BusinessException(f"Creditcode {credit_code} not found")

        if credit.customer_id != customer_id:
            logger.warning(
                f"Customer {customer_id} requested credit {credit_code} owned by another customer",
                extra={"credit_code": str(credit_code), "customer_id": customer_id}
            )
            raise ContactAdminError("Contact admin")

        return credit

    def validate_day_first_installment(self, day_first_installment: date) -> bool:
        if is_within_installment_window(day_first_installment, self.today(), self.window_months):
            return True
        raise BusinessException("Invalid Date")
