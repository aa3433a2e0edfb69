"""
Project model.

One row per project, keyed by a string UUID so that enumeration in primary
key order is stable across backends.
"""

from sqlalchemy import (
    Column,
    String,
    Boolean,
    Integer,
    DateTime,
    JSON,
)
from interest_registry.db.base import Base


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(String, nullable=False)
    logo_url = Column(String, nullable=False)
    is_active = Column(Boolean, default=False, nullable=False)
    is_suspended = Column(Boolean, default=False, nullable=False)

    interest_count = Column(Integer, default=0, nullable=False)
    # Append-only; always reassigned as a new list so the change is tracked
    interest_emails = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)
