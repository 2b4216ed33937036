"""
Multi-source company data merging.

Builds a company "template" from one or more candidate records by resolving
each field independently to the value with the highest weighted
contribution. The template can therefore combine field A from one record and
field B from another.
"""

from typing import Any, Sequence

from prospects.resolution.fields import (
    COMPANY_FIELDS,
    FieldKind,
    get_field,
    is_empty,
)
from prospects.resolution.matchers import MatchQuery
from prospects.resolution.quality import quality_score


def extract_company_fields(record: Any) -> dict[str, Any]:
    """Project the non-empty company fields of a record."""
    template = {}
    for company_field in COMPANY_FIELDS:
        value = get_field(record, company_field.name)
        if not is_empty(value):
            template[company_field.name] = value
    return template


def value_richness(kind: FieldKind, value: Any) -> float:
    """Richness multiplier for a candidate value in a merge."""
    if isinstance(value, (list, tuple)):
        return 1 + min(len(value) / 5, 1)
    if kind is FieldKind.NUMBER:
        return 1.0
    return 0.8 + min(len(str(value)) / 50, 0.2)


def merge_company_data(records: Sequence[Any]) -> dict[str, Any]:
    """
    Merge company fields from several records into one template.

    For each field, every non-empty value is scored as
    ``weight * richness * (0.7 + 0.3 * quality(record))`` and the best one
    wins. Ties keep the earliest record, i.e. the most recent one in store
    order.
    """
    if not records:
        return {}
    if len(records) == 1:
        return extract_company_fields(records[0])

    qualities = [quality_score(record) for record in records]
    merged = {}

    for company_field in COMPANY_FIELDS:
        best_value = None
        best_score = 0.0

        for record, quality in zip(records, qualities):
            value = get_field(record, company_field.name)
            if is_empty(value):
                continue

            value_score = (
                company_field.weight
                * value_richness(company_field.kind, value)
                * (0.7 + 0.3 * quality)
            )
            if value_score > best_score:
                best_score = value_score
                best_value = value

        if not is_empty(best_value):
            merged[company_field.name] = best_value

    return merged


def compute_fill_deltas(record: Any, template: dict[str, Any]) -> dict[str, Any]:
    """
    Template values for fields that are currently empty on the record.

    Populated fields are never overwritten.
    """
    deltas = {}
    for name, value in template.items():
        if is_empty(value):
            continue
        if is_empty(get_field(record, name)):
            deltas[name] = value
    return deltas


def group_contacts_by_company(records: Sequence[Any]) -> dict[str, list[Any]]:
    """
    Group records that appear to share a company.

    Key preference: website domain, then email domain, then normalized
    company name. Records with none of these get their own group.
    """
    groups: dict[str, list[Any]] = {}
    seen_ids = set()

    for record in records:
        record_id = get_field(record, "id")
        if record_id and record_id in seen_ids:
            continue

        query = MatchQuery.from_record(record)
        key = query.website or query.email_domain or query.company_name
        if not key:
            key = f"unknown_{record_id}"

        groups.setdefault(key, []).append(record)
        if record_id:
            seen_ids.add(record_id)

    return groups
