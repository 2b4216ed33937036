#!/usr/bin/env python3
"""
Tests for identifier normalization and string similarity.
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from prospects.resolution.normalize import (
    extract_email_domain,
    normalize_company_name,
    normalize_linkedin,
    normalize_website,
)
from prospects.resolution.similarity import edit_distance, fuzzy_match, similarity


def test_email_domain_extraction():
    """Company domains are extracted, webmail and malformed addresses are not."""
    print("\n=== EMAIL DOMAIN TESTS ===\n")

    assert extract_email_domain("user@acme.io") == "acme.io"
    assert extract_email_domain("  Jane.Doe@Acme.IO ") == "acme.io", "Should lower-case and strip"
    print("✓ Company domains extracted")

    for webmail in ("user@gmail.com", "someone@yahoo.com", "me@icloud.com", "x@proton.me"):
        assert extract_email_domain(webmail) is None, f"{webmail} should be rejected"
    print("✓ Webmail providers rejected")

    for malformed in (None, "", "   ", "not-an-email", "a@b", "user@acme.c"):
        assert extract_email_domain(malformed) is None, f"{malformed!r} should give None"
    print("✓ Malformed emails give None")


def test_company_name_normalization():
    """Punctuation and legal-entity suffixes are removed."""
    print("\n=== COMPANY NAME NORMALIZATION TESTS ===\n")

    test_cases = [
        ("Acme, Inc.", "acme"),
        ("acme inc", "acme"),
        ("ACME Corporation", "acme"),
        ("Stark Industries Holdings", "stark industries"),
        ("Wayne   Enterprises  LLC", "wayne enterprises"),
        ("Initech GmbH", "initech"),
        ("", ""),
        (None, ""),
    ]

    for input_name, expected in test_cases:
        result = normalize_company_name(input_name)
        assert result == expected, f"'{input_name}' should normalize to '{expected}', got '{result}'"
        print(f"✓ '{input_name}' -> '{result}'")

    assert normalize_company_name("Acme, Inc.") == normalize_company_name("acme inc")


def test_website_and_linkedin_normalization():
    """URLs reduce to bare domains and LinkedIn handles."""
    assert normalize_website("https://www.Acme.com/about?x=1") == "acme.com"
    assert normalize_website("http://acme.com") == "acme.com"
    assert normalize_website("acme.com?ref=ad") == "acme.com"
    assert normalize_website("WWW.acme.co.uk/") == "acme.co.uk"
    assert normalize_website(None) == ""
    assert normalize_website("  ") == ""
    print("✓ Website normalization")

    assert normalize_linkedin("https://www.linkedin.com/company/Acme/?trk=x") == "company/acme"
    assert normalize_linkedin("linkedin.com/company/acme/") == "company/acme"
    assert normalize_linkedin("https://uk.linkedin.com/company/acme#about") == "company/acme"
    assert normalize_linkedin(None) == ""
    print("✓ LinkedIn normalization")


def test_similarity_scoring():
    """Exact, containment and edit-distance branches."""
    print("\n=== SIMILARITY TESTS ===\n")

    for value in ("acme", "Initech", "a", "globex corporation"):
        assert similarity(value, value) == 1.0, f"{value} should be identical to itself"
    assert similarity("ACME", "acme ") == 1.0, "Should be case and whitespace insensitive"
    print("✓ Identity")

    contained = similarity("acme", "acme corp")
    assert abs(contained - 4 / 9 * 0.95) < 1e-9
    assert contained < 1.0, "Containment is never a perfect match"
    assert similarity("acme corp", "acme") == contained
    print(f"✓ Containment ({contained:.3f})")

    assert edit_distance("kitten", "sitting") == 3
    assert abs(similarity("kitten", "sitting") - (1 - 3 / 7)) < 1e-9
    assert similarity("initech", "innotech") == similarity("innotech", "initech") == 0.75
    print("✓ Edit distance branch")

    assert similarity("", "acme") == 0.0
    assert similarity(None, None) == 0.0
    assert similarity("abc", "xyz") == 0.0
    print("✓ Empty and disjoint inputs")


def test_fuzzy_match_threshold():
    assert fuzzy_match("acme", "acme")
    assert fuzzy_match("initech", "innotech")
    assert not fuzzy_match("initech", "innotech", threshold=0.8)
    assert not fuzzy_match("acme", "globex")


if __name__ == "__main__":
    test_email_domain_extraction()
    test_company_name_normalization()
    test_website_and_linkedin_normalization()
    test_similarity_scoring()
    test_fuzzy_match_threshold()
    print("\nAll normalization and similarity tests passed!")
