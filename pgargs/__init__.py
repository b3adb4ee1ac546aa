"""Encode Python values as PostgreSQL query arguments: a type registry in ``types`` and the encoders in ``values``."""

__version__ = "0.1.0"
__all__ = ["types", "values"]