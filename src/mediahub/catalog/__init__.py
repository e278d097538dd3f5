"""Persistence collaborators for media records."""

from .interfaces import Catalog
from .memory import InMemoryCatalog

__all__ = ["Catalog", "InMemoryCatalog"]
