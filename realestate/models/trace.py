"""
Property trace model: one sale event of a property.
"""

from sqlalchemy import String, BigInteger, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from realestate.config import settings
from realestate.database import Base
import uuid


class PropertyTrace(Base):
    __tablename__ = settings.property_traces_collection

    id_property: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)

    date_sale: Mapped[str] = mapped_column(String(64), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    value: Mapped[int] = mapped_column(BigInteger, nullable=False)

    tax: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
