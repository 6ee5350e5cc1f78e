"""Utility modules for SQLON."""

from .validation import ValidationUtils

__all__ = ["ValidationUtils"]
