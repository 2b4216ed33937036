#!/usr/bin/env python3
"""
Tests for the SQLAlchemy record store and job tracker.
"""

import sys
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from prospects.errors import RecordNotFoundError
from prospects.models import Base, BulkOperationJob, Company, Contact, MatchStatus
from prospects.resolution import BulkResolutionService, CompanyResolver
from prospects.resolution.progress import BatchTotals, ProgressStatus
from prospects.store import SqlJobTracker, SqlRecordStore


def make_session():
    """Fresh in-memory database."""
    engine = create_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False)()


def setup_test_data(db):
    """Create test contacts and companies."""
    db.add_all([
        Contact(id="c1", full_name="Jane Doe", email="jane@acme.io"),
        Contact(id="c2", full_name="Ann Lee", company="Acme Inc", industry="Industrial Automation"),
        Contact(id="c3", full_name="Gus Roe", website="https://www.acme.io"),
        Contact(id="c4", full_name="Max Globe", company="Globex"),
        Contact(id="c5", full_name="Del Eted", email="x@acme.io", is_deleted=True),
        Contact(id="c6", full_name="No Identifiers"),
        Contact(
            id="c7",
            full_name="Mat Ched",
            company="Acme",
            company_match_status=MatchStatus.MATCHED.value,
        ),
        Company(id="co-acme", name="Acme Inc", domains=["acme.com", "acme.io"], industry="Industrial Automation"),
        Company(id="co-globex", name="Globex", website="https://www.globex.com/", domains=[]),
        Company(id="co-gone", name="Gone Corp", domains=["gone.com"], is_deleted=True),
    ])
    db.commit()


def test_candidate_search():
    """Contacts matching any identifier, deleted rows excluded."""
    print("\n=== RECORD STORE TESTS ===\n")
    db = make_session()
    try:
        setup_test_data(db)
        store = SqlRecordStore(db)

        by_domain = store.find_candidates_by_any_identifier(email_domain="acme.io")
        assert {c.id for c in by_domain} == {"c1", "c3"}
        print("✓ Email domain matches email and website")

        by_name = store.find_candidates_by_any_identifier(company_name="acme")
        assert {c.id for c in by_name} == {"c2", "c7"}

        either = store.find_candidates_by_any_identifier(company_name="globex", email_domain="acme.io")
        assert {c.id for c in either} == {"c1", "c3", "c4"}

        assert store.find_candidates_by_any_identifier() == []
        assert len(store.find_candidates_by_any_identifier(email_domain="acme.io", limit=1)) == 1
        print("✓ OR search and limit")
    finally:
        db.close()


def test_punctuated_names_against_database():
    """ilike on the raw name finds stored names the normalized form cannot."""
    db = make_session()
    try:
        db.add_all([
            Contact(id="att", full_name="Ma Bell", company="AT&T Inc", industry="Telecommunications", company_city="Dallas"),
            Contact(id="jnj", full_name="Jo Hnson", company="Johnson & Johnson", industry="Healthcare", company_city="New Brunswick"),
            Contact(id="acme", full_name="Wile Coyote", company="Acme, Inc.", industry="Tech", company_city="Springfield"),
        ])
        db.commit()
        store = SqlRecordStore(db)

        assert store.find_candidates_by_any_identifier(company_name="johnson johnson") == []
        found = store.find_candidates_by_any_identifier(
            company_name="johnson johnson", raw_company_name="Johnson & Johnson"
        )
        assert [c.id for c in found] == ["jnj"]
        found = store.find_candidates_by_any_identifier(company_name="acme", raw_company_name="Acme, Inc.")
        assert [c.id for c in found] == ["acme"]
        print("✓ Raw and normalized name conditions OR-ed")

        resolver = CompanyResolver(SqlRecordStore(db))
        att = resolver.resolve(company_name="AT&T Inc")
        jnj = resolver.resolve(company_name="Johnson & Johnson")
        assert att is not None and att["industry"] == "Telecommunications"
        assert jnj is not None and jnj["company_city"] == "New Brunswick"
        print("✓ AT&T and Johnson & Johnson resolved through the SQL store")
    finally:
        db.close()


def test_field_deltas_and_match_status():
    db = make_session()
    try:
        setup_test_data(db)
        store = SqlRecordStore(db)

        store.apply_field_deltas("c1", {"industry": "Software", "technologies": ["Python", "Go"]})
        store.mark_match_status("c1", MatchStatus.MATCHED.value, company_id="co-acme")

        db.expire_all()
        contact = db.get(Contact, "c1")
        assert contact.industry == "Software"
        assert contact.technologies == ["Python", "Go"]
        assert contact.company_id == "co-acme"
        assert contact.is_matched
        assert contact.linked_company.name == "Acme Inc"

        with pytest.raises(RecordNotFoundError):
            store.apply_field_deltas("missing", {"industry": "x"})
        with pytest.raises(RecordNotFoundError):
            store.mark_match_status("c5", MatchStatus.MATCHED.value)
        print("✓ Deltas and match status persisted")
    finally:
        db.close()


def test_company_lookup():
    db = make_session()
    try:
        setup_test_data(db)
        store = SqlRecordStore(db)

        assert store.find_company_by_domain("ACME.io").id == "co-acme"
        assert store.find_company_by_domain("globex.com").id == "co-globex"
        assert store.find_company_by_domain("acme.co") is None
        assert store.find_company_by_domain("gone.com") is None
        print("✓ Domain lookup")

        assert store.find_company_by_name("globex").id == "co-globex"
        assert store.find_company_by_name("ACME, Inc.").id == "co-acme"
        assert store.find_company_by_name("Acme Robotic") is None
        assert store.find_company_by_name("  ") is None
        print("✓ Name lookup")
    finally:
        db.close()


def test_contact_listings():
    db = make_session()
    try:
        setup_test_data(db)
        store = SqlRecordStore(db)

        unmatched = {c.id for c in store.list_unmatched_contacts()}
        assert unmatched == {"c1", "c2", "c3", "c4", "c6"}

        with_identifiers = {c.id for c in store.list_contacts_with_identifiers()}
        assert with_identifiers == {"c1", "c2", "c3", "c4", "c7"}
    finally:
        db.close()


def test_job_tracker():
    print("\n=== JOB TRACKER TESTS ===\n")
    db = make_session()
    try:
        tracker = SqlJobTracker(db)
        job_id = tracker.start("bulk-autofill", 10)

        totals = BatchTotals(total=10, processed=4, success=2, failed=1, skipped=1, matched=2)
        tracker.update_progress(job_id, totals)
        tracker.record_error(job_id, {"item_id": "a", "item_name": "A", "error": "boom"})
        tracker.record_error(job_id, {"item_id": "b", "item_name": "B", "error": "bust"})
        assert not tracker.is_cancelled(job_id)

        tracker.cancel(job_id)
        assert tracker.is_cancelled(job_id)

        tracker.finish(job_id, ProgressStatus.CANCELLED, totals, "stopped")
        db.expire_all()
        job = db.get(BulkOperationJob, job_id)
        assert job.status == "cancelled"
        assert job.is_finished
        assert (job.processed_items, job.success_count, job.failed_count) == (4, 2, 1)
        assert [e["item_id"] for e in job.errors] == ["a", "b"]
        assert job.results["matched"] == 2
        assert job.started_at is not None and job.finished_at is not None
        print(f"✓ {job}")

        with pytest.raises(RecordNotFoundError):
            tracker.is_cancelled("missing")
    finally:
        db.close()


def test_bulk_auto_fill_against_database():
    """End to end over ORM rows with a persisted job."""
    db = make_session()
    try:
        db.add_all([
            Contact(
                id="ref",
                full_name="Ada Reference",
                email="ceo@acme.io",
                company="Acme Inc",
                website="acme.io",
                industry="Industrial Automation",
                employees=120,
                annual_revenue=Decimal("42000000.00"),
            ),
            Contact(id="new", full_name="Jane Doe", email="jane@acme.io", company="Acme", industry="Retail"),
        ])
        db.commit()

        service = BulkResolutionService(SqlRecordStore(db), tracker=SqlJobTracker(db))
        result = service.bulk_auto_fill()

        db.expire_all()
        contact = db.get(Contact, "new")
        assert contact.industry == "Retail"
        assert contact.website == "acme.io"
        assert contact.employees == 120
        assert contact.annual_revenue == Decimal("42000000.00")

        job = db.query(BulkOperationJob).one()
        assert job.status == "completed"
        assert job.operation_type == "bulk-autofill"
        assert (job.total_items, job.processed_items, job.success_count) == (2, 2, 1)
        assert result.totals.matched == 2
        print("✓ Auto-fill persisted through the SQL store")
    finally:
        db.close()


if __name__ == "__main__":
    test_candidate_search()
    test_punctuated_names_against_database()
    test_field_deltas_and_match_status()
    test_company_lookup()
    test_contact_listings()
    test_job_tracker()
    test_bulk_auto_fill_against_database()
    print("\nAll store tests passed!")
