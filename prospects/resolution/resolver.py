"""
Company Template Resolver

Resolves a contact's company identifiers to a merged template of company
attributes drawn from the best-matching records in the store.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from config.logging import get_logger
from config.settings import settings
from prospects.resolution.matchers import MatchQuery, MatchScorer, ScoringConfig
from prospects.resolution.merger import extract_company_fields, merge_company_data

if TYPE_CHECKING:
    from prospects.store import RecordStore

logger = get_logger("resolver")


@dataclass
class ResolverConfig:
    """Configuration for template resolution."""
    # Candidates with a damped match score above this are merged together
    high_confidence_score: float = 30.0

    # Templates with fewer populated fields are discarded
    min_template_fields: int = 2

    # Maximum candidates requested from the store
    candidate_limit: int = 100

    # Top-ranked candidates considered for merging
    top_matches: int = 10

    scoring: ScoringConfig = field(default_factory=ScoringConfig)

    @classmethod
    def from_settings(cls) -> "ResolverConfig":
        return cls(
            high_confidence_score=settings.HIGH_CONFIDENCE_SCORE,
            min_template_fields=settings.MIN_TEMPLATE_FIELDS,
            candidate_limit=settings.CANDIDATE_LIMIT,
            top_matches=settings.TOP_MATCHES,
            scoring=ScoringConfig.from_settings(),
        )


class CompanyResolver:
    """
    Resolves company templates for contacts.

    Resolution strategy:
    1. Normalize identifiers; nothing usable means no template
    2. Fetch candidates matching ANY identifier from the store
    3. Rank them with the multi-channel match scorer, keep the top 10
    4. Merge all high-confidence candidates (score > 30), or fall back to the
       single best candidate when none qualify
    5. Reject templates with fewer than 2 populated fields

    Usage:
        resolver = CompanyResolver(store)
        template = resolver.resolve(
            company_name="Acme, Inc.",
            email="jane@acme.io",
        )
        if template:
            print(template["industry"])
    """

    def __init__(
        self,
        store: "RecordStore",
        config: Optional[ResolverConfig] = None,
    ):
        self.store = store
        self.config = config or ResolverConfig.from_settings()
        self.scorer = MatchScorer(self.config.scoring)

    def resolve(
        self,
        company_name: Optional[str] = None,
        website: Optional[str] = None,
        company_linkedin: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Optional[dict[str, Any]]:
        """
        Resolve a company template from raw identifiers.

        Args:
            company_name: Free-text company name
            website: Company website URL
            company_linkedin: Company LinkedIn URL
            email: Contact email (only the domain is used)

        Returns:
            Template of company fields, or None if nothing confident was found
        """
        query = MatchQuery.from_identifiers(company_name, website, company_linkedin, email)
        return self.resolve_query(query)

    def resolve_for_contact(self, record: Any) -> Optional[dict[str, Any]]:
        """Resolve a template using a contact's own identifiers."""
        return self.resolve_query(MatchQuery.from_record(record))

    def resolve_query(self, query: MatchQuery) -> Optional[dict[str, Any]]:
        """Resolve a template for already-normalized identifiers."""
        if query.is_empty:
            logger.debug("No usable identifiers, skipping resolution")
            return None

        candidates = self.store.find_candidates_by_any_identifier(
            company_name=query.company_name or None,
            raw_company_name=query.raw_company_name or None,
            website=query.website or None,
            company_linkedin=query.company_linkedin or None,
            email_domain=query.email_domain,
            limit=self.config.candidate_limit,
        )
        if not candidates:
            logger.debug(f"No candidates for {query.cache_key}")
            return None

        best_matches = self.scorer.find_best_matches(
            candidates, query, limit=self.config.top_matches
        )
        if not best_matches:
            logger.debug(f"No scoring candidates among {len(candidates)} for {query.cache_key}")
            return None

        high_confidence = [
            m for m in best_matches if m.score > self.config.high_confidence_score
        ]

        if high_confidence:
            template = merge_company_data([m.record for m in high_confidence])
            logger.debug(
                f"Merged {len(high_confidence)} high-confidence candidates for "
                f"{query.cache_key} (best: {best_matches[0]})"
            )
        else:
            template = extract_company_fields(best_matches[0].record)
            logger.debug(f"Falling back to best single candidate {best_matches[0]}")

        if len(template) < self.config.min_template_fields:
            logger.debug(
                f"Template for {query.cache_key} has {len(template)} field(s), rejected"
            )
            return None

        return template
