# account_audit/infrastructure/database/models.py

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from account_audit.infrastructure.database.session import Base


class AccountModel(Base):
    """ORM model for accounts. Roles are stored as a JSON list of normalized tokens."""

    __tablename__ = "accounts"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    password = Column(String(255), nullable=False)
    roles = Column(JSON, nullable=False)
    register_time = Column(DateTime(timezone=True), nullable=True)
    last_login_time = Column(DateTime(timezone=True), nullable=True)
    ip_address = Column(String(255), nullable=True)
    user_agent = Column(Text, nullable=True)
    status = Column(String(50), nullable=False, default="active")


class LogModel(Base):
    """ORM model for audit log records. Rows are inserted once and never updated."""

    __tablename__ = "logs"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    time = Column(DateTime(timezone=True), nullable=True)
    level = Column(Integer, nullable=False)
    # Correlation only, no foreign key: accounts may be deleted while their logs remain.
    user_id = Column(Integer, nullable=True, index=True)
    ip_address = Column(String(255), nullable=True, index=True)
    user_agent = Column(Text, nullable=True)
    request_uri = Column(Text, nullable=True)
    request_method = Column(String(16), nullable=True)


class LogTriageModel(Base):
    """Mutable read/unread state of a log record. Absent row means UNREADED."""

    __tablename__ = "log_triage"

    log_id = Column(Integer, primary_key=True)
    status = Column(String(32), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
