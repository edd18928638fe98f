"""ORM model for application users (account owners)."""

from sqlalchemy import Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from taskmanager.models.base import Base


class User(Base):
    """
    Account for JWT authentication. Owns categories and tasks.

    password_hash is a bcrypt hash and is never serialized into responses.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(50), nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    categories = relationship("Category", back_populates="owner", passive_deletes=True)
    tasks = relationship("Task", back_populates="owner", passive_deletes=True)
