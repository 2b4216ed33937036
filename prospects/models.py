"""
Prospect Resolution Engine - Database Models

SQLAlchemy ORM models for contacts, canonical companies and bulk jobs.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.sqlite import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


# Enums
class MatchStatus(PyEnum):
    MATCHED = "matched"
    UNMATCHED = "unmatched"
    PENDING_REVIEW = "pending_review"
    MANUAL = "manual"


class JobStatus(PyEnum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class OperationType(PyEnum):
    BULK_MATCH = "bulk-match"
    BULK_AUTOFILL = "bulk-autofill"


def generate_uuid() -> str:
    return str(uuid.uuid4())


class Company(Base):
    """
    Canonical company records.
    Contacts are linked here by bulk match-to-company.
    """

    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    name: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    website: Mapped[Optional[str]] = mapped_column(Text)
    linkedin_url: Mapped[Optional[str]] = mapped_column(Text)

    # Lower-cased domains used for matching, e.g. ["acme.com", "acme.io"]
    domains: Mapped[Optional[list]] = mapped_column(JSON, default=list)

    # Details
    industry: Mapped[Optional[str]] = mapped_column(Text, index=True)
    employees: Mapped[Optional[int]] = mapped_column(Integer)
    employee_size_bracket: Mapped[Optional[str]] = mapped_column(String(50))
    annual_revenue: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 2))
    technologies: Mapped[Optional[str]] = mapped_column(Text)
    business_type: Mapped[Optional[str]] = mapped_column(Text)

    # Location
    address: Mapped[Optional[str]] = mapped_column(Text)
    city: Mapped[Optional[str]] = mapped_column(Text)
    state: Mapped[Optional[str]] = mapped_column(Text)
    country: Mapped[Optional[str]] = mapped_column(Text, index=True)

    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, index=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), onupdate=func.now(), nullable=False
    )

    contacts: Mapped[list["Contact"]] = relationship(back_populates="linked_company")

    def __repr__(self) -> str:
        return f"<Company(id={self.id}, name={self.name})>"


class Contact(Base):
    """
    Contacts and prospects, scraped or imported.
    Company fields are free text until the contact is linked to a Company.
    """

    __tablename__ = "contacts"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )

    # Link to canonical company
    company_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("companies.id"), nullable=True, index=True
    )
    company_match_status: Mapped[Optional[str]] = mapped_column(
        String(20), default=MatchStatus.UNMATCHED.value, index=True
    )

    # Person
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[Optional[str]] = mapped_column(Text)
    email: Mapped[Optional[str]] = mapped_column(Text, index=True)

    # Company identity
    company: Mapped[Optional[str]] = mapped_column(Text, index=True)
    website: Mapped[Optional[str]] = mapped_column(Text)
    company_linkedin: Mapped[Optional[str]] = mapped_column(Text)

    # Company attributes
    industry: Mapped[Optional[str]] = mapped_column(Text, index=True)
    employees: Mapped[Optional[int]] = mapped_column(Integer)
    employee_size_bracket: Mapped[Optional[str]] = mapped_column(String(50))
    annual_revenue: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 2))
    technologies: Mapped[Optional[list]] = mapped_column(JSON, default=list)
    company_address: Mapped[Optional[str]] = mapped_column(Text)
    company_city: Mapped[Optional[str]] = mapped_column(Text)
    company_state: Mapped[Optional[str]] = mapped_column(Text)
    company_country: Mapped[Optional[str]] = mapped_column(Text)
    company_age: Mapped[Optional[int]] = mapped_column(Integer)
    technology_category: Mapped[Optional[str]] = mapped_column(Text)
    business_type: Mapped[Optional[str]] = mapped_column(Text)

    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, index=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), onupdate=func.now(), nullable=False
    )

    linked_company: Mapped[Optional["Company"]] = relationship(back_populates="contacts")

    __table_args__ = (
        Index("ix_contacts_status_created", "company_match_status", "created_at"),
    )

    @property
    def is_matched(self) -> bool:
        """Check if this contact is linked to a canonical company."""
        return self.company_id is not None and self.company_match_status in (
            MatchStatus.MATCHED.value,
            MatchStatus.MANUAL.value,
        )

    def __repr__(self) -> str:
        return f"<Contact(id={self.id}, name={self.full_name}, company={self.company})>"


class BulkOperationJob(Base):
    """
    Bulk operation jobs.
    Tracks progress counters, errors and status for operator-facing display.
    """

    __tablename__ = "bulk_operation_jobs"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    operation_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String(20), default=JobStatus.PENDING.value, nullable=False, index=True
    )

    # Progress tracking
    total_items: Mapped[int] = mapped_column(Integer, default=0)
    processed_items: Mapped[int] = mapped_column(Integer, default=0)
    success_count: Mapped[int] = mapped_column(Integer, default=0)
    failed_count: Mapped[int] = mapped_column(Integer, default=0)
    skipped_count: Mapped[int] = mapped_column(Integer, default=0)
    matched_count: Mapped[int] = mapped_column(Integer, default=0)

    # Results
    errors: Mapped[Optional[list]] = mapped_column(JSON, default=list)
    results: Mapped[Optional[dict]] = mapped_column(JSON)
    message: Mapped[Optional[str]] = mapped_column(Text)

    # Timing
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    finished_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), onupdate=func.now(), nullable=False
    )

    @property
    def is_finished(self) -> bool:
        return self.status in (
            JobStatus.COMPLETED.value,
            JobStatus.FAILED.value,
            JobStatus.CANCELLED.value,
        )

    def __repr__(self) -> str:
        return (
            f"<BulkOperationJob(id={self.id}, type={self.operation_type}, "
            f"status={self.status}, processed={self.processed_items}/{self.total_items})>"
        )
