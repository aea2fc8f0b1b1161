"""User model definitions."""

from sqlalchemy import Column, Integer, String
from medbook.database import Base


class User(Base):
    """Represents an application user."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, default="")
    hashed_password = Column(String, default="")
    role = Column(String, default="user")  # user/admin
