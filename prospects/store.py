"""
Record store and job tracker collaborators.

The resolution engine only talks to these protocols. SqlRecordStore and
SqlJobTracker implement them over the SQLAlchemy models.
"""

from typing import Any, Optional, Protocol, Sequence

from sqlalchemy import String, and_, cast, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config.logging import get_logger
from config.settings import settings
from prospects.errors import RecordNotFoundError, StoreError
from prospects.models import BulkOperationJob, Company, Contact, JobStatus, MatchStatus
from prospects.resolution.normalize import normalize_company_name, normalize_website
from prospects.resolution.progress import BatchTotals, ProgressStatus
from prospects.resolution.similarity import similarity

logger = get_logger("store")


class RecordStore(Protocol):
    """Where contacts and canonical companies are read from and written to."""

    def find_candidates_by_any_identifier(
        self,
        company_name: Optional[str] = None,
        raw_company_name: Optional[str] = None,
        website: Optional[str] = None,
        company_linkedin: Optional[str] = None,
        email_domain: Optional[str] = None,
        limit: int = 100,
    ) -> Sequence[Any]:
        """
        Contacts matching ANY identifier, most recent first.

        company_name is the normalized name; raw_company_name is the name as
        typed, so stored names with punctuation ("AT&T Inc") are still found.
        """
        ...

    def apply_field_deltas(self, contact_id: str, fields: dict[str, Any]) -> Any:
        ...

    def mark_match_status(
        self,
        contact_id: str,
        status: str,
        company_id: Optional[str] = None,
    ) -> None:
        ...

    def find_company_by_domain(self, domain: str) -> Optional[Any]:
        ...

    def find_company_by_name(self, name: str) -> Optional[Any]:
        ...

    def list_unmatched_contacts(self) -> Sequence[Any]:
        ...

    def list_contacts_with_identifiers(self) -> Sequence[Any]:
        ...


class JobTracker(Protocol):
    """Owns the persisted bulk job record that operators watch."""

    def start(self, operation_type: str, total: int) -> str:
        ...

    def update_progress(self, job_id: str, totals: BatchTotals) -> None:
        ...

    def record_error(self, job_id: str, error: dict) -> None:
        ...

    def is_cancelled(self, job_id: str) -> bool:
        ...

    def finish(
        self,
        job_id: str,
        status: ProgressStatus,
        totals: BatchTotals,
        message: Optional[str] = None,
    ) -> None:
        ...


def _not_blank(column):
    return and_(column.isnot(None), column != "")


class SqlRecordStore:
    """
    RecordStore backed by a SQLAlchemy session.

    Usage:
        db = SessionLocal()
        store = SqlRecordStore(db)
        candidates = store.find_candidates_by_any_identifier(email_domain="acme.io")
    """

    def __init__(self, db: Session):
        self.db = db

    def _get_contact(self, contact_id: str) -> Contact:
        contact = self.db.get(Contact, contact_id)
        if contact is None or contact.is_deleted:
            raise RecordNotFoundError("Contact", contact_id)
        return contact

    def _commit(self, action: str):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"{action} failed, rolling back: {e}")
            self.db.rollback()
            raise StoreError(f"{action} failed: {e}") from e

    def find_candidates_by_any_identifier(
        self,
        company_name: Optional[str] = None,
        raw_company_name: Optional[str] = None,
        website: Optional[str] = None,
        company_linkedin: Optional[str] = None,
        email_domain: Optional[str] = None,
        limit: int = settings.CANDIDATE_LIMIT,
    ) -> list[Contact]:
        conditions = []
        if company_name:
            conditions.append(Contact.company.ilike(f"%{company_name}%"))
        if raw_company_name:
            conditions.append(Contact.company.ilike(f"%{raw_company_name.strip()}%"))
        if website:
            conditions.append(Contact.website.ilike(f"%{website}%"))
        if company_linkedin:
            conditions.append(Contact.company_linkedin.ilike(f"%{company_linkedin}%"))
        if email_domain:
            conditions.append(Contact.email.ilike(f"%@{email_domain}"))
            conditions.append(Contact.website.ilike(f"%{email_domain}%"))

        if not conditions:
            return []

        try:
            return (
                self.db.query(Contact)
                .filter(Contact.is_deleted.is_(False), or_(*conditions))
                .order_by(Contact.created_at.desc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            raise StoreError(f"Candidate search failed: {e}") from e

    def apply_field_deltas(self, contact_id: str, fields: dict[str, Any]) -> Contact:
        contact = self._get_contact(contact_id)
        for name, value in fields.items():
            setattr(contact, name, value)
        self._commit(f"Updating contact {contact_id}")
        return contact

    def mark_match_status(
        self,
        contact_id: str,
        status: str,
        company_id: Optional[str] = None,
    ) -> None:
        contact = self._get_contact(contact_id)
        contact.company_match_status = status
        if company_id is not None:
            contact.company_id = company_id
        self._commit(f"Marking contact {contact_id} {status}")

    def find_company_by_domain(self, domain: str) -> Optional[Company]:
        """Company whose domains list or website matches the domain."""
        domain = domain.strip().lower()
        if not domain:
            return None

        try:
            candidates = (
                self.db.query(Company)
                .filter(
                    Company.is_deleted.is_(False),
                    or_(
                        cast(Company.domains, String).ilike(f'%"{domain}"%'),
                        Company.website.ilike(f"%{domain}%"),
                    ),
                )
                .order_by(Company.created_at.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise StoreError(f"Company domain lookup failed: {e}") from e

        for company in candidates:
            if domain in [d.strip().lower() for d in (company.domains or [])]:
                return company
            if normalize_website(company.website) == domain:
                return company
        return None

    def find_company_by_name(self, name: str) -> Optional[Company]:
        """
        Company with the same name (case-insensitive), else the closest
        normalized-name match at or above the fuzzy name threshold.
        """
        if not name or not name.strip():
            return None

        try:
            exact = (
                self.db.query(Company)
                .filter(
                    Company.is_deleted.is_(False),
                    func.lower(Company.name) == name.strip().lower(),
                )
                .first()
            )
            if exact is not None:
                return exact

            normalized = normalize_company_name(name)
            if not normalized:
                return None

            candidates = (
                self.db.query(Company)
                .filter(
                    Company.is_deleted.is_(False),
                    Company.name.ilike(f"%{normalized.split()[0]}%"),
                )
                .all()
            )
        except SQLAlchemyError as e:
            raise StoreError(f"Company name lookup failed: {e}") from e

        best_company = None
        best_score = 0.0
        for company in candidates:
            score = similarity(normalized, normalize_company_name(company.name))
            if score > best_score:
                best_score = score
                best_company = company

        if best_company is not None and best_score >= settings.FUZZY_NAME_THRESHOLD:
            logger.debug(f"Fuzzy company match '{name}' -> '{best_company.name}' ({best_score:.2f})")
            return best_company
        return None

    def list_unmatched_contacts(self) -> list[Contact]:
        try:
            return (
                self.db.query(Contact)
                .filter(
                    Contact.is_deleted.is_(False),
                    or_(
                        Contact.company_match_status.in_([
                            MatchStatus.UNMATCHED.value,
                            MatchStatus.PENDING_REVIEW.value,
                        ]),
                        Contact.company_match_status.is_(None),
                    ),
                )
                .order_by(Contact.created_at.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise StoreError(f"Listing unmatched contacts failed: {e}") from e

    def list_contacts_with_identifiers(self) -> list[Contact]:
        try:
            return (
                self.db.query(Contact)
                .filter(
                    Contact.is_deleted.is_(False),
                    or_(
                        _not_blank(Contact.company),
                        _not_blank(Contact.website),
                        _not_blank(Contact.company_linkedin),
                        _not_blank(Contact.email),
                    ),
                )
                .order_by(Contact.created_at.desc())
                .all()
            )
        except SQLAlchemyError as e:
            raise StoreError(f"Listing contacts failed: {e}") from e


class SqlJobTracker:
    """JobTracker persisting counters onto BulkOperationJob rows."""

    def __init__(self, db: Session):
        self.db = db

    def _get_job(self, job_id: str) -> BulkOperationJob:
        job = self.db.get(BulkOperationJob, job_id)
        if job is None:
            raise RecordNotFoundError("BulkOperationJob", job_id)
        return job

    def _commit(self):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Job update failed: {e}") from e

    def start(self, operation_type: str, total: int) -> str:
        job = BulkOperationJob(
            operation_type=operation_type,
            status=JobStatus.RUNNING.value,
            total_items=total,
            errors=[],
            started_at=func.now(),
        )
        self.db.add(job)
        self._commit()
        logger.info(f"Started job {job.id} ({operation_type}, {total} items)")
        return job.id

    def update_progress(self, job_id: str, totals: BatchTotals) -> None:
        job = self._get_job(job_id)
        job.total_items = totals.total
        job.processed_items = totals.processed
        job.success_count = totals.success
        job.failed_count = totals.failed
        job.skipped_count = totals.skipped
        job.matched_count = totals.matched
        self._commit()

    def record_error(self, job_id: str, error: dict) -> None:
        job = self._get_job(job_id)
        # Reassign so the JSON column is flagged dirty
        job.errors = [*(job.errors or []), error]
        self._commit()

    def is_cancelled(self, job_id: str) -> bool:
        job = self._get_job(job_id)
        self.db.refresh(job)
        return job.status == JobStatus.CANCELLED.value

    def cancel(self, job_id: str) -> None:
        job = self._get_job(job_id)
        if not job.is_finished:
            job.status = JobStatus.CANCELLED.value
            self._commit()

    def finish(
        self,
        job_id: str,
        status: ProgressStatus,
        totals: BatchTotals,
        message: Optional[str] = None,
    ) -> None:
        job = self._get_job(job_id)
        job.total_items = totals.total
        job.processed_items = totals.processed
        job.success_count = totals.success
        job.failed_count = totals.failed
        job.skipped_count = totals.skipped
        job.matched_count = totals.matched
        job.status = status.value
        job.message = message
        job.results = totals.to_dict()
        job.finished_at = func.now()
        self._commit()
