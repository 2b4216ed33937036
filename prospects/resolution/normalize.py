"""
Identifier normalization.

Canonicalizes the four identifier channels (company name, website, LinkedIn
URL, email domain) so they can be compared across records. None of these
functions raise: malformed input comes back as "" or None and the channel
simply stops contributing to a match.
"""

import re
from typing import Optional

# Legal-entity and generic business words dropped from company names
COMPANY_SUFFIXES = {
    "inc", "incorporated", "corp", "corporation", "llc", "ltd", "limited",
    "co", "company", "gmbh", "ag", "sa", "plc", "pvt", "private",
    "holdings", "group", "intl", "international", "worldwide", "global",
    "solutions", "services", "technologies", "tech", "systems", "software",
}

# Consumer webmail providers never identify a company
COMMON_EMAIL_PROVIDERS = {
    "gmail.com", "yahoo.com", "hotmail.com", "outlook.com", "live.com",
    "aol.com", "icloud.com", "mail.com", "protonmail.com", "zoho.com",
    "yandex.com", "gmx.com", "fastmail.com", "tutanota.com", "proton.me",
}

EMAIL_DOMAIN_PATTERN = re.compile(r"@([a-z0-9.-]+\.[a-z]{2,})$")
SCHEME_PATTERN = re.compile(r"^https?://")


def extract_email_domain(email: Optional[str]) -> Optional[str]:
    """
    Extract the company domain from an email address.

    Returns None for missing or malformed addresses and for webmail domains.
    """
    if not email or not email.strip():
        return None

    match = EMAIL_DOMAIN_PATTERN.search(email.strip().lower())
    if not match:
        return None

    domain = match.group(1)
    if domain in COMMON_EMAIL_PROVIDERS:
        return None
    return domain


def normalize_company_name(name: Optional[str]) -> str:
    """
    Normalize company name for comparison.

    - Lowercase everything
    - Replace punctuation with spaces
    - Drop legal-entity suffix tokens (Inc, LLC, GmbH, Holdings, ...)
    - Collapse whitespace
    """
    if not name or not name.strip():
        return ""

    normalized = re.sub(r"[^\w\s]", " ", name.strip().lower())
    words = [w for w in normalized.split() if w not in COMPANY_SUFFIXES]
    return " ".join(words)


def normalize_website(url: Optional[str]) -> str:
    """Reduce a website URL to its bare domain: ``https://www.acme.com/about`` -> ``acme.com``."""
    if not url or not url.strip():
        return ""

    normalized = SCHEME_PATTERN.sub("", url.strip().lower())
    if normalized.startswith("www."):
        normalized = normalized[4:]
    normalized = normalized.split("/")[0]
    normalized = normalized.split("?")[0]
    return normalized


def normalize_linkedin(url: Optional[str]) -> str:
    """
    Reduce a LinkedIn URL to its handle path.

    ``https://www.linkedin.com/company/Acme/?trk=x`` -> ``company/acme``.
    Values that are not linkedin.com URLs are returned lower-cased with the
    scheme, ``www.``, query and trailing slashes removed.
    """
    if not url or not url.strip():
        return ""

    normalized = SCHEME_PATTERN.sub("", url.strip().lower())
    if normalized.startswith("www."):
        normalized = normalized[4:]
    normalized = re.split(r"[?#]", normalized, maxsplit=1)[0].rstrip("/")

    host, _, path = normalized.partition("/")
    if host.endswith("linkedin.com") and path:
        return path
    return normalized
