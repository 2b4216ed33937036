"""
Company Resolution Module

Resolves prospect contacts to company templates combining:
- Identifier normalization (company name, website, LinkedIn, email domain)
- Multi-channel weighted match scoring (rapidfuzz edit distance)
- Quality-weighted field merging and fill-only-empty deltas
- Chunked bulk match/auto-fill with per-batch template caching
"""

from prospects.resolution.batch import BulkResolutionService, TemplateCache
from prospects.resolution.matchers import (
    MatchCandidate,
    MatchQuery,
    MatchScorer,
    MatchType,
    ScoringConfig,
    find_best_matches,
    score_match,
)
from prospects.resolution.merger import (
    compute_fill_deltas,
    group_contacts_by_company,
    merge_company_data,
)
from prospects.resolution.progress import (
    BatchProcessor,
    BatchResult,
    BatchTotals,
    ProgressEvent,
    ProgressStatus,
)
from prospects.resolution.quality import quality_level, quality_score
from prospects.resolution.resolver import CompanyResolver, ResolverConfig

__all__ = [
    "BulkResolutionService",
    "TemplateCache",
    "CompanyResolver",
    "ResolverConfig",
    "MatchCandidate",
    "MatchQuery",
    "MatchScorer",
    "MatchType",
    "ScoringConfig",
    "find_best_matches",
    "score_match",
    "compute_fill_deltas",
    "group_contacts_by_company",
    "merge_company_data",
    "quality_level",
    "quality_score",
    "BatchProcessor",
    "BatchResult",
    "BatchTotals",
    "ProgressEvent",
    "ProgressStatus",
]
