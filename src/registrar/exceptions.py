"""Custom exception hierarchy for registrar."""

from __future__ import annotations


class RegistrarError(Exception):
    """Base exception for all registrar errors."""


class RegistrarConfigError(RegistrarError):
    """Invalid or missing configuration."""


class InvalidOptionsError(RegistrarError):
    """Options passed to a model operation could not be validated.

    Wraps the underlying pydantic ``ValidationError`` so callers only need
    to catch the registrar hierarchy.
    """

    def __init__(self, message: str, *, errors: list[dict] | None = None) -> None:
        self.errors = errors or []
        super().__init__(message)
