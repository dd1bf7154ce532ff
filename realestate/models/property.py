"""
Property model for real-estate listings.
"""

from sqlalchemy import String, Integer, BigInteger, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from realestate.config import settings
from realestate.database import Base
import uuid


class Property(Base):
    """
    A listed property. The owner is referenced by id; images and traces point
    back at the property through their own id_property column.
    """

    __tablename__ = settings.properties_collection

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    address: Mapped[str] = mapped_column(String(500), nullable=False)

    # Smallest currency unit
    price: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)

    code_internal: Mapped[int] = mapped_column(Integer, nullable=False)

    year: Mapped[int] = mapped_column(Integer, nullable=False)

    id_owner: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, name='{self.name}', price={self.price})>"
