"""
Property image model.
"""

from sqlalchemy import Boolean, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from realestate.config import settings
from realestate.database import Base
import uuid


class PropertyImage(Base):
    """
    Image attached to a property. A property surfaces at most one image,
    so creating a second one for the same property updates the first.
    """

    __tablename__ = settings.property_images_collection

    id_property: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)

    # URL or encoded content
    file: Mapped[str] = mapped_column(Text, nullable=False)

    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<PropertyImage(id={self.id}, id_property={self.id_property})>"
