"""
Phone number inventory.

Per-tenant storage of numbers, their lifecycle and the adapter the Teams
reconciliation workflow uses to read and write it.
"""

from src.db.phone_numbers.model import PhoneNumber
from src.db.phone_numbers.repository import PhoneNumberRepository

__all__ = ["PhoneNumber", "PhoneNumberRepository"]
