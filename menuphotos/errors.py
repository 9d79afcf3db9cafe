# menuphotos/errors.py
from __future__ import annotations


class ConfigurationError(Exception):
    """Bad pool config or bad item records. Aborts before anything is written."""


class EmissionValidationError(Exception):
    """A value cannot be embedded safely as a SQL string literal."""
