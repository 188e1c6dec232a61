"""Customer domain service: create, fetch, update and delete customers."""
from typing import Any, Dict

from credit_system.core.exceptions import BusinessException
from credit_system.core.logging import get_logger
from credit_system.domain.customer import Customer
from credit_system.infrastructure.repositories import CustomerRepository

logger = get_logger(__name__)

# Fields a partial update may touch, mapped to where they live on Customer
UPDATABLE_FIELDS = {
    "first_name": (),
    "last_name": (),
    "income": (),
    "zip_code": ("address",),
    "street": ("address",),
}


class CustomerService:
    """Business operations on customers.

    Uniqueness of cpf/email is left to the repository, which raises
    PersistenceConflict on a duplicate.
    """

    def __init__(self, repository: CustomerRepository):
        self.repository = repository

    def save(self, customer: Customer) -> Customer:
        saved = self.repository.save(customer)
        logger.info(f"Customer {saved.id} saved", extra={"customer_id": saved.id})
        return saved

    def find_by_id(self, customer_id: int) -> Customer:
        customer = self.repository.find_by_id(customer_id)
        if customer is None:
            raise BusinessException(f"ID {customer_id} not found")
        return customer

    def delete(self, customer_id: int) -> None:
        customer = self.find_by_id(customer_id)
        self.repository.delete(customer)
        logger.info(f"Customer {customer_id} deleted", extra={"customer_id": customer_id})

    def update(self, customer_id: int, changes: Dict[str, Any]) -> Customer:
        """Merge partial changes onto an existing customer and save it.

        Args:
            customer_id: Customer to update
            changes: Subset of first_name, last_name, income, zip_code, street;
                None values are ignored

        Returns:
            The saved customer

        Raises:
            BusinessException: If the customer does not exist
        """
        customer = self.find_by_id(customer_id)

        for field, value in changes.items():
            if value is None or field not in UPDATABLE_FIELDS:
                continue
            target = customer
            for parent in UPDATABLE_FIELDS[field]:
                target = getattr(target, parent)
            setattr(target, field, value)

        return self.save(customer)
