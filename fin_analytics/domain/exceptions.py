"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class AnalyticsInputError(DomainException):
    """Analysis input is malformed; the whole call fails with no partial result"""

    pass


class InvalidTransactionDataError(AnalyticsInputError):
    """Transaction data is malformed or invalid (unparsable date, non-numeric amount)"""

    pass
