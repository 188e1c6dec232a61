"""Redis-backed repositories for customers and credits.

Key layout (all keys carry the configured prefix, ``credit:`` by default):

    customer:seq                 id counter (INCR)
    customer:<id>                customer JSON
    customer:cpf:<cpf>           id owning that cpf (SET NX claim)
    customer:email:<email>       id owning that email (SET NX claim)
    customer:<id>:credits        list of credit codes, insertion order
    credit:seq                   id counter (INCR)
    credit:<code>                credit JSON with the owning customer_id

For a managed instance set REDIS_HOST / REDIS_PORT / REDIS_PASSWORD and
STORAGE_BACKEND=redis.
"""
import uuid
import redis
from typing import List, Optional

from credit_system.core.config import settings
from credit_system.core.exceptions import PersistenceConflict
from credit_system.core.logging import get_logger
from credit_system.domain.credit import Credit
from credit_system.domain.customer import Customer
from credit_system.infrastructure.repositories import (
    UNIQUE_CUSTOMER_FIELDS,
    CreditRepository,
    CustomerRepository,
)

logger = get_logger(__name__)

# Redis connection pool (lazy initialization)
_redis_pool: Optional[redis.ConnectionPool] = None
_redis_client: Optional[redis.Redis] = None


def get_redis_client(
    host: Optional[str] = None,
    port: Optional[int] = None,
    db: Optional[int] = None,
    password: Optional[str] = None,
) -> Optional[redis.Redis]:
    """Get or create the shared Redis client.

    Uses settings from environment variables if not explicitly provided.
    Returns None if Redis is not reachable so callers can fall back to
    in-memory storage.
    """
    global _redis_pool, _redis_client

    host = host or settings.redis_host
    port = port or settings.redis_port
    db = db if db is not None else settings.redis_db
    password = password or settings.redis_password

    if _redis_client is None:
        logger.info(f"Initializing Redis connection pool: {host}:{port}")

        try:
            _redis_pool = redis.ConnectionPool(
                host=host,
                port=port,
                db=db,
                password=password,
                decode_responses=True,
                max_connections=50,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            client = redis.Redis(connection_pool=_redis_pool)
            client.ping()
            _redis_client = client
            logger.info("Redis connection established successfully")

        except redis.RedisError as e:
            logger.error(f"Failed to connect to Redis: {e}", exc_info=True)
            _redis_client = None
            return None

    return _redis_client


class RedisCustomerRepository(CustomerRepository):
    """Customer storage in Redis with SET NX claims for unique fields."""

    def __init__(self, redis_client: redis.Redis, key_prefix: Optional[str] = None):
        self.redis = redis_client
        self.key_prefix = settings.redis_key_prefix if key_prefix is None else key_prefix

    def _make_key(self, *parts) -> str:
        return self.key_prefix + ":".join(str(part) for part in parts)

    def save(self, customer: Customer) -> Customer:
        try:
            return self._save(customer)
        except redis.RedisError as e:
            logger.error(f"Error saving customer {customer.id}: {e}", exc_info=True)
            raise PersistenceConflict(f"Could not save customer: {e}") from e

    def _save(self, customer: Customer) -> Customer:
        stored = customer.model_copy(deep=True)
        previous = self.find_by_id(stored.id) if stored.id is not None else None
        if stored.id is None:
            stored.id = int(self.redis.incr(self._make_key("customer", "seq")))

        claimed: List[str] = []
        for field in UNIQUE_CUSTOMER_FIELDS:
            value = getattr(stored, field)
            if previous is not None and getattr(previous, field) == value:
                continue
            key = self._make_key("customer", field, value)
            if not self.redis.set(key, stored.id, nx=True) and self.redis.get(key) != str(stored.id):
                if claimed:
                    self.redis.delete(*claimed)
                raise PersistenceConflict(f"Customer with {field} {value} already exists")
            claimed.append(key)

        try:
            self.redis.set(self._make_key("customer", stored.id), stored.model_dump_json())
        except redis.RedisError:
            if claimed:
                self.redis.delete(*claimed)
            raise

        if previous is not None:
            stale = [
                self._make_key("customer", field, getattr(previous, field))
                for field in UNIQUE_CUSTOMER_FIELDS
                if getattr(previous, field) != getattr(stored, field)
            ]
            if stale:
                self.redis.delete(*stale)

        logger.debug(f"Customer {stored.id} stored in Redis")
        return stored

    def find_by_id(self, customer_id: int) -> Optional[Customer]:
        try:
            data = self.redis.get(self._make_key("customer", customer_id))
        except redis.RedisError as e:
            raise PersistenceConflict(f"Could not read customer {customer_id}: {e}") from e
        if not data:
            return None
        return Customer.model_validate_json(data)

    def delete(self, customer: Customer) -> None:
        keys = [self._make_key("customer", customer.id)]
        keys.extend(
            self._make_key("customer", field, getattr(customer, field))
            for field in UNIQUE_CUSTOMER_FIELDS
        )
        try:
            self.redis.delete(*keys)
        except redis.RedisError as e:
            raise PersistenceConflict(f"Could not delete customer {customer.id}: {e}") from e
        logger.debug(f"Customer {customer.id} removed from Redis")


class RedisCreditRepository(CreditRepository):
    """Credit storage in Redis, indexed per owning customer."""

    def __init__(
        self,
        redis_client: redis.Redis,
        customers: CustomerRepository,
        key_prefix: Optional[str] = None,
    ):
        self.redis = redis_client
        self.customers = customers
        self.key_prefix = settings.redis_key_prefix if key_prefix is None else key_prefix

    def _make_key(self, *parts) -> str:
        return self.key_prefix + ":".join(str(part) for part in parts)

    def save(self, credit: Credit) -> Credit:
        stored = credit.model_copy(deep=True)
        try:
            if stored.id is None:
                stored.id = int(self.redis.incr(self._make_key("credit", "seq")))

            payload = stored.model_dump_json(exclude={"customer"})
            if not self.redis.set(self._make_key("credit", stored.credit_code), payload, nx=True):
                raise PersistenceConflict(f"Credit with credit code {stored.credit_code} already exists")

            if stored.customer_id is not None:
                self.redis.rpush(
                    self._make_key("customer", stored.customer_id, "credits"),
                    str(stored.credit_code),
                )
        except redis.RedisError as e:
            logger.error(f"Error saving credit {stored.credit_code}: {e}", exc_info=True)
            raise PersistenceConflict(f"Could not save credit: {e}") from e

        logger.debug(f"Credit {stored.credit_code} stored in Redis")
        return stored

    def find_by_credit_code(self, credit_code: uuid.UUID) -> Optional[Credit]:
        try:
            data = self.redis.get(self._make_key("credit", credit_code))
        except redis.RedisError as e:
            raise PersistenceConflict(f"Could not read credit {credit_code}: {e}") from e
        if not data:
            return None
        return self._load(data)

    def find_all_by_customer(self, customer_id: int) -> List[Credit]:
        try:
            codes = self.redis.lrange(self._make_key("customer", customer_id, "credits"), 0, -1)
            records = [self.redis.get(self._make_key("credit", code)) for code in codes]
        except redis.RedisError as e:
            raise PersistenceConflict(f"Could not list credits of customer {customer_id}: {e}") from e
        return [self._load(data) for data in records if data]

    def _load(self, data: str) -> Credit:
        credit = Credit.model_validate_json(data)
        if credit.customer_id is not None:
            credit.customer = self.customers.find_by_id(credit.customer_id)
        return credit
