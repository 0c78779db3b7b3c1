"""Exception types raised by matinfo."""

from __future__ import annotations


class MatInfoError(Exception):
    """Base class for all matinfo errors."""


class LogicError(MatInfoError, RuntimeError):
    """Programmer defect: API used out of order or on inconsistent data."""


class BadInput(MatInfoError, ValueError):
    """Caller-supplied data is invalid."""
