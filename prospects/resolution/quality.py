"""
Data quality scoring for company fields.
"""

from typing import Any

from prospects.resolution.fields import (
    COMPANY_FIELDS,
    TOTAL_FIELD_WEIGHT,
    FieldKind,
    get_field,
    is_empty,
)


def field_richness(kind: FieldKind, value: Any) -> float:
    """
    Fraction of a field's weight earned by a populated value.

    Lists reach full credit at 3 items, strings at 20 characters (with a 0.7
    floor), numbers always earn full credit.
    """
    if isinstance(value, (list, tuple)):
        return min(1.0, len(value) / 3)
    if kind is FieldKind.NUMBER:
        return 1.0
    return 0.7 + 0.3 * min(1.0, len(str(value).strip()) / 20)


def quality_score(record: Any) -> float:
    """
    Score how much company information a record carries, 0..1.

    A record with only a company name scores low; one with name, website,
    industry, revenue and address scores high.
    """
    score = 0.0
    for company_field in COMPANY_FIELDS:
        value = get_field(record, company_field.name)
        if is_empty(value):
            continue
        score += company_field.weight * field_richness(company_field.kind, value)

    return score / TOTAL_FIELD_WEIGHT if TOTAL_FIELD_WEIGHT else 0.0


def quality_level(score: float) -> str:
    """Bucket a quality score for display."""
    if score >= 0.8:
        return "excellent"
    if score >= 0.6:
        return "good"
    if score >= 0.4:
        return "fair"
    return "poor"
