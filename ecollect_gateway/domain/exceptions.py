"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class RecordStoreError(DomainException):
    """Record store (Postgres or Supabase) is unreachable or returned bad data"""

    def __init__(self, message: str, table: str | None = None):
        super().__init__(message)
        self.table = table


class AccountNotFoundError(DomainException):
    """No notes or SMS logs exist for the requested customer"""

    pass


class LLMServiceError(DomainException):
    """Assistant completion API returned an error or is unavailable"""

    pass
