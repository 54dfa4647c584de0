from __future__ import annotations


class PayrollError(Exception):
    """Base class for errors raised by the payroll engine."""


class ValidationError(PayrollError):
    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class ConflictError(PayrollError):
    """A unique key (employee national ID or record id) is already stored."""

    def __init__(self, message: str, field: str = "cpf"):
        super().__init__(message)
        self.field = field
        self.message = message


class ConnectivityError(PayrollError):
    """The remote mirror could not be reached."""


class DataIntegrityError(PayrollError):
    """A payroll record references an employee that is not in the roster."""
