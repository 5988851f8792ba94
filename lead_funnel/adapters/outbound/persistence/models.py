"""SQLAlchemy ORM models shared by the persistence adapters."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserModel(Base):
    """SQLAlchemy model for users table (task owners)."""

    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    email = Column(String, nullable=True)
    name = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class TaskModel(Base):
    """SQLAlchemy model for tasks table."""

    __tablename__ = "tasks"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String, ForeignKey("users.id"), nullable=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    ai_prompt = Column(Text, nullable=True)
    first_question = Column(Text, nullable=True)
    notify_email = Column(String, nullable=True)
    is_public = Column(Boolean, nullable=False, default=True)
    show_others = Column(Boolean, nullable=False, default=False)
    source_post_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)


class LeadModel(Base):
    """SQLAlchemy model for leads table."""

    __tablename__ = "leads"
    __table_args__ = (UniqueConstraint("task_id", "phone", name="uq_leads_task_id_phone"),)

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    task_id = Column(String, ForeignKey("tasks.id"), nullable=False, index=True)
    name = Column(String, nullable=True)
    phone = Column(String, nullable=False)
    email = Column(String, nullable=True, index=True)
    rating = Column(Integer, nullable=True)
    email_sent = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )


class ConversationModel(Base):
    """SQLAlchemy model for conversations table (one row per lead)."""

    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    lead_id = Column(String, ForeignKey("leads.id"), nullable=False, unique=True, index=True)
    full_chat = Column(JSON, nullable=False)
    summary = Column(Text, nullable=True)
    is_public = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )
