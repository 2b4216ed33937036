"""
In-memory contact and company records.

The engine reads records by attribute name, so ORM rows from
``prospects.models`` and these dataclasses are interchangeable.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class ContactRecord:
    """A contact/prospect as seen by the resolution engine."""
    id: str = ""
    full_name: str = ""
    email: Optional[str] = None

    # Company identity
    company: Optional[str] = None
    website: Optional[str] = None
    company_linkedin: Optional[str] = None

    # Company attributes
    industry: Optional[str] = None
    employees: Optional[int] = None
    employee_size_bracket: Optional[str] = None
    annual_revenue: Optional[Decimal] = None
    technologies: list[str] = field(default_factory=list)
    company_address: Optional[str] = None
    company_city: Optional[str] = None
    company_state: Optional[str] = None
    company_country: Optional[str] = None
    company_age: Optional[int] = None
    technology_category: Optional[str] = None
    business_type: Optional[str] = None

    # Link to canonical company
    company_id: Optional[str] = None
    company_match_status: Optional[str] = None

    created_at: Optional[datetime] = None

    def __repr__(self) -> str:
        return f"<ContactRecord(id={self.id}, name={self.full_name}, company={self.company})>"


@dataclass
class CompanyRecord:
    """A canonical company used by bulk match-to-company."""
    id: str
    name: str
    website: Optional[str] = None
    linkedin_url: Optional[str] = None
    domains: list[str] = field(default_factory=list)
    industry: Optional[str] = None
    employees: Optional[int] = None
    employee_size_bracket: Optional[str] = None
    annual_revenue: Optional[Decimal] = None
    technologies: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    business_type: Optional[str] = None

    def __repr__(self) -> str:
        return f"<CompanyRecord(id={self.id}, name={self.name})>"
