"""SQLAlchemy models for the pattern registry."""

from sqlalchemy import Column, Integer, String, Text
from .config.database import Base

class PatternRecord(Base):
    """SQLAlchemy model for registry patterns."""
    __tablename__ = 'patterns'

    id = Column(Integer, primary_key=True, autoincrement=True)
    pattern = Column(Text, nullable=False)
    component = Column(String(255), nullable=False, default="")
    owner = Column(Integer, nullable=False, index=True)
    version = Column(Integer, nullable=False, default=1)
