"""
PhotoCatalog Database Models
Exports all models for use throughout the application.
"""

from photocatalog.models.user import User
from photocatalog.models.catalog import CatalogEntry

__all__ = [
    "User",
    "CatalogEntry",
]
