"""
User model for authentication and role-based access.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column
from realestate.config import settings
from realestate.database import Base


class User(Base):
    """
    Application user. Email is unique and stored lower-case; the password is
    only ever stored as a bcrypt hash.
    """

    __tablename__ = settings.users_collection

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    email: Mapped[str] = mapped_column(String(150), unique=True, nullable=False, index=True)

    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[str] = mapped_column(String(20), nullable=False, default=settings.default_role)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
