"""Error taxonomy shared by the domain services and the HTTP boundary."""


class CreditSystemError(Exception):
    """Base exception for errors raised by this application."""


class BusinessException(CreditSystemError):
    """Raised when a business rule is violated or a business key is unknown."""


class PersistenceConflict(CreditSystemError):
    """Raised when the storage layer rejects a write (e.g. a duplicate cpf)."""


class ContactAdminError(ValueError):
    """Raised when a credit is requested on behalf of a customer that does not own it.

    Kept apart from the business errors: it is answered with a server-class
    status because a legitimate client should never reach it.
    """
