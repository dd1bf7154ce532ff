"""
Database models.
"""

from realestate.models.property import Property
from realestate.models.owner import Owner
from realestate.models.image import PropertyImage
from realestate.models.trace import PropertyTrace
from realestate.models.user import User

__all__ = ["Property", "Owner", "PropertyImage", "PropertyTrace", "User"]
