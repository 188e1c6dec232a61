"""Persistence gateway for customers and credits.

The abstract repositories define what the domain services need from storage.
Lookups return ``None`` when nothing matches; turning that into a domain
error is the services' job. Uniqueness of customer cpf/email is enforced
here and reported as ``PersistenceConflict``.

`InMemoryCustomerRepository` / `InMemoryCreditRepository` back local
development and the test suite; the Redis implementations live in
`credit_system.infrastructure.redis`.
"""
import threading
import uuid
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from credit_system.core.exceptions import PersistenceConflict
from credit_system.core.logging import get_logger
from credit_system.domain.credit import Credit
from credit_system.domain.customer import Customer

logger = get_logger(__name__)

UNIQUE_CUSTOMER_FIELDS = ("cpf", "email")


class CustomerRepository(ABC):
    """Storage of customer records."""

    @abstractmethod
    def save(self, customer: Customer) -> Customer:
        """Insert (no id) or fully replace (id set) a customer; returns the stored record."""

    @abstractmethod
    def find_by_id(self, customer_id: int) -> Optional[Customer]:
        pass

    @abstractmethod
    def delete(self, customer: Customer) -> None:
        pass


class CreditRepository(ABC):
    """Storage of credit records."""

    @abstractmethod
    def save(self, credit: Credit) -> Credit:
        pass

    @abstractmethod
    def find_by_credit_code(self, credit_code: uuid.UUID) -> Optional[Credit]:
        pass

    @abstractmethod
    def find_all_by_customer(self, customer_id: int) -> List[Credit]:
        pass


class InMemoryCustomerRepository(CustomerRepository):
    """Dict-backed customer storage.

    Records are copied on the way in and out so callers never share state
    with the store.
    """

    def __init__(self):
        self._records: Dict[int, Customer] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def save(self, customer: Customer) -> Customer:
        with self._lock:
            self._check_unique(customer)
            stored = customer.model_copy(deep=True)
            if stored.id is None:
                stored.id = self._next_id
                self._next_id += 1
            else:
                self._next_id = max(self._next_id, stored.id + 1)
            self._records[stored.id] = stored
            logger.debug(f"Customer {stored.id} stored")
            return stored.model_copy(deep=True)

    def find_by_id(self, customer_id: int) -> Optional[Customer]:
        stored = self._records.get(customer_id)
        return stored.model_copy(deep=True) if stored else None

    def delete(self, customer: Customer) -> None:
        with self._lock:
            self._records.pop(customer.id, None)
            logger.debug(f"Customer {customer.id} removed")

    def _check_unique(self, customer: Customer) -> None:
        for other in self._records.values():
            if other.id == customer.id:
                continue
            for field in UNIQUE_CUSTOMER_FIELDS:
                value = getattr(customer, field)
                if getattr(other, field) == value:
                    raise PersistenceConflict(f"Customer with {field} {value} already exists")


class InMemoryCreditRepository(CreditRepository):
    """Dict-backed credit storage keyed by credit code.

    Only the owning customer's id is kept with each credit; the customer is
    re-read from `customers` on every lookup, so a deleted customer shows up
    as ``credit.customer is None`` while ``credit.customer_id`` is kept.
    """

    def __init__(self, customers: CustomerRepository):
        self.customers = customers
        self._records: Dict[uuid.UUID, Credit] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def save(self, credit: Credit) -> Credit:
        with self._lock:
            existing = self._records.get(credit.credit_code)
            if existing is not None and existing.id != credit.id:
                raise PersistenceConflict(f"Credit with credit code {credit.credit_code} already exists")

            stored = credit.model_copy(deep=True, update={"customer": None})
            if stored.id is None:
                stored.id = self._next_id
                self._next_id += 1
            self._records[stored.credit_code] = stored
            logger.debug(f"Credit {stored.credit_code} stored for customer {stored.customer_id}")

        return self._hydrate(stored)

    def find_by_credit_code(self, credit_code: uuid.UUID) -> Optional[Credit]:
        stored = self._records.get(credit_code)
        return self._hydrate(stored) if stored else None

    def find_all_by_customer(self, customer_id: int) -> List[Credit]:
        return [
            self._hydrate(stored)
            for stored in self._records.values()
            if stored.customer_id == customer_id
        ]

    def _hydrate(self, stored: Credit) -> Credit:
        customer = None
        if stored.customer_id is not None:
            customer = self.customers.find_by_id(stored.customer_id)
        return stored.model_copy(deep=True, update={"customer": customer})
