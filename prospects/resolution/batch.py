"""
Bulk resolution workflows.

- Bulk match-to-company: link unmatched contacts to canonical companies by
  email/website domain, then by company name.
- Bulk auto-fill: resolve a company template per contact and fill only the
  fields that are currently empty.

Both reuse resolutions through a TemplateCache owned by the batch call and
report progress through BatchProcessor.
"""

import threading
from typing import TYPE_CHECKING, Any, Callable, Hashable, Optional

from config.logging import get_logger
from prospects.models import MatchStatus, OperationType
from prospects.resolution.fields import get_field, is_empty
from prospects.resolution.matchers import MatchQuery
from prospects.resolution.merger import compute_fill_deltas
from prospects.resolution.normalize import extract_email_domain, normalize_website
from prospects.resolution.progress import (
    BatchProcessor,
    BatchResult,
    BatchTotals,
    ItemOutcome,
    ItemStatus,
    ProgressCallback,
)
from prospects.resolution.resolver import CompanyResolver

if TYPE_CHECKING:
    from prospects.store import JobTracker, RecordStore

logger = get_logger("batch")


class TemplateCache:
    """
    Per-batch memo of resolutions keyed by normalized identifier tuple.

    Guarded by a lock so a caller may share one cache between workers.
    """

    def __init__(self):
        self._entries: dict[Hashable, Any] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get_or_resolve(self, key: Hashable, resolve: Callable[[], Any]) -> Any:
        with self._lock:
            if key in self._entries:
                self.hits += 1
                return self._entries[key]

        value = resolve()

        with self._lock:
            self.misses += 1
            return self._entries.setdefault(key, value)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> dict:
        with self._lock:
            return {"entries": len(self._entries), "hits": self.hits, "misses": self.misses}


def contact_label(contact: Any) -> tuple[str, str]:
    """(id, display name) for progress events and error records."""
    contact_id = str(get_field(contact, "id") or "")
    name = (
        get_field(contact, "full_name")
        or get_field(contact, "email")
        or get_field(contact, "company")
        or contact_id
    )
    return contact_id, str(name)


def company_attributes(company: Any) -> dict[str, Any]:
    """Canonical company attributes mapped onto contact field names."""
    technologies = get_field(company, "technologies")
    if isinstance(technologies, str):
        technologies = [t.strip() for t in technologies.split(",") if t.strip()]

    fields = {
        "company": get_field(company, "name"),
        "industry": get_field(company, "industry"),
        "employees": get_field(company, "employees"),
        "employee_size_bracket": get_field(company, "employee_size_bracket"),
        "website": get_field(company, "website"),
        "company_linkedin": get_field(company, "linkedin_url"),
        "technologies": technologies,
        "annual_revenue": get_field(company, "annual_revenue"),
        "company_address": get_field(company, "address"),
        "company_city": get_field(company, "city"),
        "company_state": get_field(company, "state"),
        "company_country": get_field(company, "country"),
        "business_type": get_field(company, "business_type"),
    }
    return {name: value for name, value in fields.items() if not is_empty(value)}


class BulkResolutionService:
    """
    Runs the bulk workflows over a record store.

    Usage:
        service = BulkResolutionService(store, tracker=tracker, on_progress=print)
        result = service.bulk_auto_fill()
        print(result.totals)
    """

    def __init__(
        self,
        store: "RecordStore",
        tracker: Optional["JobTracker"] = None,
        resolver: Optional[CompanyResolver] = None,
        on_progress: Optional[ProgressCallback] = None,
        batch_size: Optional[int] = None,
    ):
        self.store = store
        self.tracker = tracker
        self.resolver = resolver or CompanyResolver(store)
        self.on_progress = on_progress
        self.batch_size = batch_size

    def _run(
        self,
        operation_type: OperationType,
        list_items: Callable[[], list],
        handler: Callable[[Any, TemplateCache], ItemOutcome],
    ) -> BatchResult:
        processor = BatchProcessor(
            operation_type.value,
            tracker=self.tracker,
            on_progress=self.on_progress,
            batch_size=self.batch_size,
        )
        cache = TemplateCache()
        totals = BatchTotals()

        try:
            totals = processor.start(0)
            items = list(list_items())
            processor.set_total(totals, len(items))
            result = processor.process(
                items,
                lambda item: handler(item, cache),
                item_label=contact_label,
                totals=totals,
            )
        except Exception as e:
            processor.fail(totals, e)
            raise
        finally:
            result_stats = cache.stats()
            cache.clear()

        result.stats["cache"] = result_stats
        logger.info(
            f"{operation_type.value}: {result_stats['misses']} resolutions, "
            f"{result_stats['hits']} cache hits"
        )
        return result

    def bulk_match_to_companies(self) -> BatchResult:
        """
        Link every unmatched contact to a canonical company.

        Domain match (email, then website) is tried before name match.
        Unresolved contacts are marked pending_review when they carry a
        company name and unmatched otherwise.
        """
        return self._run(
            OperationType.BULK_MATCH,
            self.store.list_unmatched_contacts,
            self._match_contact,
        )

    def bulk_auto_fill(self, dry_run: bool = False) -> BatchResult:
        """
        Fill empty company fields of every contact that has an identifier.

        Populated fields are never overwritten. With dry_run the deltas are
        computed and reported but not written.
        """
        return self._run(
            OperationType.BULK_AUTOFILL,
            self.store.list_contacts_with_identifiers,
            lambda contact, cache: self._auto_fill_contact(contact, cache, dry_run),
        )

    @staticmethod
    def company_lookup_key(contact: Any) -> tuple[str, str, str]:
        """
        The identifiers find_company reads: email domain, website domain and
        the trimmed, lower-cased company name.

        The name stays un-normalized because the name lookup tries an exact
        match first, so "Acme Holdings" and "Acme Group" must not share a key.
        """
        return (
            extract_email_domain(get_field(contact, "email")) or "",
            normalize_website(get_field(contact, "website")),
            (get_field(contact, "company") or "").strip().lower(),
        )

    def find_company(self, contact: Any) -> Optional[Any]:
        """Canonical company for a contact: domain first, then name."""
        email_domain, website_domain, name = self.company_lookup_key(contact)

        for domain in (email_domain, website_domain):
            if domain:
                company = self.store.find_company_by_domain(domain)
                if company is not None:
                    return company

        if name:
            return self.store.find_company_by_name(get_field(contact, "company"))
        return None

    def _match_contact(self, contact: Any, cache: TemplateCache) -> ItemOutcome:
        contact_id, name = contact_label(contact)
        lookup_key = self.company_lookup_key(contact)

        company = None
        if any(lookup_key):
            company = cache.get_or_resolve(
                ("company",) + lookup_key,
                lambda: self.find_company(contact),
            )

        if company is not None:
            self.store.apply_field_deltas(contact_id, company_attributes(company))
            self.store.mark_match_status(
                contact_id, MatchStatus.MATCHED.value, company_id=get_field(company, "id")
            )
            logger.debug(f"Matched {name} -> {get_field(company, 'name')}")
            return ItemOutcome(
                status=ItemStatus.SUCCESS,
                matched=True,
                step="matched",
                company_matched=get_field(company, "name"),
                result=company,
            )

        company_name = get_field(contact, "company")
        if company_name and company_name.strip():
            status = MatchStatus.PENDING_REVIEW
        else:
            status = MatchStatus.UNMATCHED
        self.store.mark_match_status(contact_id, status.value)
        return ItemOutcome(status=ItemStatus.SKIPPED, step=status.value)

    def _auto_fill_contact(
        self,
        contact: Any,
        cache: TemplateCache,
        dry_run: bool = False,
    ) -> ItemOutcome:
        contact_id, name = contact_label(contact)
        query = MatchQuery.from_record(contact)
        if query.is_empty:
            return ItemOutcome(status=ItemStatus.SKIPPED, step="no_identifiers")

        template = cache.get_or_resolve(
            ("template",) + query.cache_key,
            lambda: self.resolver.resolve_query(query),
        )
        if template is None:
            return ItemOutcome(status=ItemStatus.SKIPPED, step="no_template")

        deltas = compute_fill_deltas(contact, template)
        if not deltas:
            return ItemOutcome(
                status=ItemStatus.SKIPPED,
                matched=True,
                step="nothing_to_fill",
                fields_filled=[],
            )

        if not dry_run:
            self.store.apply_field_deltas(contact_id, deltas)
        logger.debug(f"Auto-filled {len(deltas)} field(s) for {name}: {', '.join(deltas)}")

        return ItemOutcome(
            status=ItemStatus.SUCCESS,
            matched=True,
            step="dry_run" if dry_run else "filled",
            fields_filled=list(deltas),
            result=deltas,
        )
