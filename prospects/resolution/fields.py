"""
Company attribute field table.

One (field, weight, kind) entry per company-related contact field. The quality
scorer, match scorer and merger all iterate this table, so the weights stay
comparable across the three.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class FieldKind(Enum):
    """How a field's value is measured for richness."""
    TEXT = "text"
    LIST = "list"
    NUMBER = "number"


@dataclass(frozen=True)
class CompanyField:
    name: str
    weight: int
    kind: FieldKind


COMPANY_FIELDS: tuple[CompanyField, ...] = (
    CompanyField("company", 5, FieldKind.TEXT),
    CompanyField("website", 8, FieldKind.TEXT),
    CompanyField("company_linkedin", 7, FieldKind.TEXT),
    CompanyField("industry", 6, FieldKind.TEXT),
    CompanyField("employees", 4, FieldKind.NUMBER),
    CompanyField("employee_size_bracket", 3, FieldKind.TEXT),
    CompanyField("annual_revenue", 5, FieldKind.NUMBER),
    CompanyField("technologies", 4, FieldKind.LIST),
    CompanyField("company_address", 2, FieldKind.TEXT),
    CompanyField("company_city", 2, FieldKind.TEXT),
    CompanyField("company_state", 2, FieldKind.TEXT),
    CompanyField("company_country", 3, FieldKind.TEXT),
    CompanyField("company_age", 2, FieldKind.NUMBER),
    CompanyField("technology_category", 3, FieldKind.TEXT),
    CompanyField("business_type", 4, FieldKind.TEXT),
)

COMPANY_FIELD_NAMES: tuple[str, ...] = tuple(f.name for f in COMPANY_FIELDS)

TOTAL_FIELD_WEIGHT: int = sum(f.weight for f in COMPANY_FIELDS)


def is_empty(value: Any) -> bool:
    """True for None, blank strings and empty lists/tuples. Zero is a value."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def get_field(record: Any, name: str) -> Any:
    """Read a field from an ORM row, dataclass or plain mapping."""
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)
