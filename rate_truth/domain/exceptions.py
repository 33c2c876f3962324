"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidCashFlowError(DomainException):
    """Cash flow sequence violates the solver's input contract"""

    pass
