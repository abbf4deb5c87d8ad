"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the budget-item models used by ``offbudget``.
"""

from .budget import Base, ObItem, ObItemAdjustment, ObTransaction

__all__ = [
    "Base",
    "ObItem",
    "ObItemAdjustment",
    "ObTransaction",
]
