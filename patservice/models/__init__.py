"""Domain models for token persistence."""

from .token import TokenRecord

__all__ = ["TokenRecord"]
