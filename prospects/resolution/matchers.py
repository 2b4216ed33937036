"""
Multi-channel match scoring.

Each identifier channel (company name, website, LinkedIn, email domain)
contributes independently to an additive score, which is then damped by the
candidate's data quality.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional

from config.logging import get_logger
from config.settings import settings
from prospects.resolution.fields import get_field
from prospects.resolution.normalize import (
    extract_email_domain,
    normalize_company_name,
    normalize_linkedin,
    normalize_website,
)
from prospects.resolution.quality import quality_score
from prospects.resolution.similarity import similarity

logger = get_logger("matchers")


class MatchType(Enum):
    """Which channel produced a match."""
    EXACT_COMPANY = "exact_company"
    FUZZY_COMPANY = "fuzzy_company"
    PARTIAL_COMPANY = "partial_company"
    EXACT_WEBSITE = "exact_website"
    EXACT_LINKEDIN = "exact_linkedin"
    EMAIL_DOMAIN = "email_domain"
    NONE = "none"


# Label used when a channel fires after another one already has
COMPOSITE_LABELS = {
    MatchType.EXACT_WEBSITE: "website",
    MatchType.EXACT_LINKEDIN: "linkedin",
    MatchType.EMAIL_DOMAIN: "email",
}


@dataclass
class ScoringConfig:
    """Channel thresholds and points for match scoring."""
    fuzzy_name_threshold: float = 0.85
    partial_name_threshold: float = 0.70
    website_similarity_threshold: float = 0.8

    exact_name_points: float = 100.0
    fuzzy_name_points: float = 80.0
    partial_name_points: float = 50.0
    exact_website_points: float = 120.0
    fuzzy_website_points: float = 60.0
    linkedin_points: float = 110.0
    email_domain_points: float = 90.0

    @classmethod
    def from_settings(cls) -> "ScoringConfig":
        return cls(
            fuzzy_name_threshold=settings.FUZZY_NAME_THRESHOLD,
            partial_name_threshold=settings.PARTIAL_NAME_THRESHOLD,
            website_similarity_threshold=settings.WEBSITE_SIMILARITY_THRESHOLD,
        )


@dataclass(frozen=True)
class MatchQuery:
    """
    Normalized identifiers of the contact being resolved.

    raw_company_name keeps the trimmed name as typed for store searches;
    it takes no part in scoring, equality or the cache key.
    """
    company_name: str = ""
    website: str = ""
    company_linkedin: str = ""
    email_domain: Optional[str] = None
    raw_company_name: str = field(default="", compare=False)

    @classmethod
    def from_identifiers(
        cls,
        company_name: Optional[str] = None,
        website: Optional[str] = None,
        company_linkedin: Optional[str] = None,
        email: Optional[str] = None,
    ) -> "MatchQuery":
        return cls(
            company_name=normalize_company_name(company_name),
            website=normalize_website(website),
            company_linkedin=normalize_linkedin(company_linkedin),
            email_domain=extract_email_domain(email),
            raw_company_name=(company_name or "").strip(),
        )

    @classmethod
    def from_record(cls, record: Any) -> "MatchQuery":
        return cls.from_identifiers(
            company_name=get_field(record, "company"),
            website=get_field(record, "website"),
            company_linkedin=get_field(record, "company_linkedin"),
            email=get_field(record, "email"),
        )

    @property
    def is_empty(self) -> bool:
        return not (
            self.company_name or self.website or self.company_linkedin or self.email_domain
        )

    @property
    def cache_key(self) -> tuple[str, str, str, str]:
        return (
            self.company_name,
            self.website,
            self.company_linkedin,
            self.email_domain or "",
        )


@dataclass
class MatchCandidate:
    """Result of scoring one candidate record against a query."""
    record: Any = None
    score: float = 0.0
    confidence: float = 0.0
    matched_on: list[MatchType] = field(default_factory=list)
    details: dict = field(default_factory=dict)

    @property
    def match_type(self) -> str:
        """Composite label, e.g. ``exact_company+website``."""
        if not self.matched_on:
            return MatchType.NONE.value
        first, *rest = self.matched_on
        return "+".join([first.value] + [COMPOSITE_LABELS.get(m, m.value) for m in rest])

    @property
    def is_match(self) -> bool:
        return self.record is not None and self.score > 0

    def __repr__(self) -> str:
        if self.record is not None:
            return (
                f"<MatchCandidate({get_field(self.record, 'company')}, {self.match_type}, "
                f"score={self.score:.1f}, conf={self.confidence:.2f})>"
            )
        return "<MatchCandidate(no match)>"


class MatchScorer:
    """
    Scores candidate records against a query's identifiers.

    Channels are additive:
    - Company name: exact (+100), fuzzy >=0.85 (+80*sim), partial >=0.70 (+50*sim)
    - Website domain: exact (+120), similar >=0.8 (+60*sim)
    - LinkedIn handle: exact only (+110)
    - Email domain: exact (+90)

    The total is multiplied by 0.5 + 0.5 * quality, so a perfect identifier
    match on a near-empty record is worth half as much as on a rich one.
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or ScoringConfig.from_settings()

    def score(self, record: Any, query: MatchQuery) -> MatchCandidate:
        """Score a single candidate record."""
        cfg = self.config
        result = MatchCandidate(record=record)

        # Company name channel
        candidate_name = normalize_company_name(get_field(record, "company"))
        if query.company_name and candidate_name:
            if query.company_name == candidate_name:
                result.score += cfg.exact_name_points
                result.matched_on.append(MatchType.EXACT_COMPANY)
                result.confidence = 1.0
            else:
                sim = similarity(query.company_name, candidate_name)
                result.details["name_similarity"] = sim
                if sim >= cfg.fuzzy_name_threshold:
                    result.score += cfg.fuzzy_name_points * sim
                    result.matched_on.append(MatchType.FUZZY_COMPANY)
                    result.confidence = sim
                elif sim >= cfg.partial_name_threshold:
                    result.score += cfg.partial_name_points * sim
                    result.matched_on.append(MatchType.PARTIAL_COMPANY)
                    result.confidence = sim * 0.8

        # Website channel
        candidate_website = normalize_website(get_field(record, "website"))
        if query.website and candidate_website:
            if query.website == candidate_website:
                result.score += cfg.exact_website_points
                result.matched_on.append(MatchType.EXACT_WEBSITE)
                result.confidence = max(result.confidence, 1.0)
            else:
                domain_sim = similarity(query.website, candidate_website)
                result.details["website_similarity"] = domain_sim
                if domain_sim >= cfg.website_similarity_threshold:
                    result.score += cfg.fuzzy_website_points * domain_sim
                    result.confidence = max(result.confidence, domain_sim)

        # LinkedIn channel - handles are exact identifiers, no fuzzy tier
        candidate_linkedin = normalize_linkedin(get_field(record, "company_linkedin"))
        if query.company_linkedin and candidate_linkedin == query.company_linkedin:
            result.score += cfg.linkedin_points
            result.matched_on.append(MatchType.EXACT_LINKEDIN)
            result.confidence = max(result.confidence, 1.0)

        # Email domain channel
        if query.email_domain:
            candidate_domain = extract_email_domain(get_field(record, "email"))
            if candidate_domain == query.email_domain:
                result.score += cfg.email_domain_points
                result.matched_on.append(MatchType.EMAIL_DOMAIN)
                result.confidence = max(result.confidence, 0.95)

        quality = quality_score(record)
        result.details["quality"] = quality
        result.score *= 0.5 + 0.5 * quality

        return result

    def find_best_matches(
        self,
        records: Iterable[Any],
        query: MatchQuery,
        limit: Optional[int] = None,
    ) -> list[MatchCandidate]:
        """
        Score all records and return the top matches with score > 0.

        The sort is stable, so equal scores keep the input order (the store
        returns candidates most-recent-first).
        """
        if limit is None:
            limit = settings.TOP_MATCHES

        scored = [self.score(record, query) for record in records]
        matches = [m for m in scored if m.score > 0]
        matches.sort(key=lambda m: m.score, reverse=True)

        logger.debug(
            f"Scored {len(scored)} candidates, {len(matches)} with score > 0"
        )
        return matches[:limit]


def score_match(
    record: Any,
    company_name: Optional[str] = None,
    website: Optional[str] = None,
    company_linkedin: Optional[str] = None,
    email_domain: Optional[str] = None,
) -> MatchCandidate:
    """Score one record against raw query identifiers using default settings."""
    query = MatchQuery(
        company_name=normalize_company_name(company_name),
        website=normalize_website(website),
        company_linkedin=normalize_linkedin(company_linkedin),
        email_domain=(email_domain or "").strip().lower() or None,
    )
    return MatchScorer().score(record, query)


def find_best_matches(
    records: Iterable[Any],
    company_name: Optional[str] = None,
    website: Optional[str] = None,
    company_linkedin: Optional[str] = None,
    email: Optional[str] = None,
    limit: Optional[int] = None,
) -> list[MatchCandidate]:
    """Rank records for raw query identifiers; the email domain is derived once."""
    query = MatchQuery.from_identifiers(company_name, website, company_linkedin, email)
    return MatchScorer().find_best_matches(records, query, limit=limit)
