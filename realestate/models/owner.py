"""
Owner model.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column
from realestate.config import settings
from realestate.database import Base


class Owner(Base):
    """Owner of one or more properties."""

    __tablename__ = settings.owners_collection

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    address: Mapped[str] = mapped_column(String(500), nullable=False)

    photo: Mapped[str] = mapped_column(String(2048), nullable=False)

    # Kept as the client sent it (string-encoded date)
    birthday: Mapped[str] = mapped_column(String(64), nullable=False)
