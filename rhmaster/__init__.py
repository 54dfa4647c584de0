"""Payroll closing engine with a local-first synchronized store."""

__version__ = "0.1.0"
