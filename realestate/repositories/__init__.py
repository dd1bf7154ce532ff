"""
Repository layer for data access operations.
"""

from realestate.repositories.base import BaseRepository
from realestate.repositories.property import PropertyRepository
from realestate.repositories.owner import OwnerRepository
from realestate.repositories.image import ImageRepository
from realestate.repositories.trace import TraceRepository
from realestate.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "PropertyRepository",
    "OwnerRepository",
    "ImageRepository",
    "TraceRepository",
    "UserRepository",
]
