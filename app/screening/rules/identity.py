"""Payer identity rules.

Inspect the email address and its domain. Throwaway, test and
high-risk top-level domains are a common trait of card-testing and
account-takeover traffic, and generated addresses tend to carry
long digit runs, stray symbols or plus-tagged domains.

A malformed email simply yields an empty domain, which never matches
any of the domain rules.
"""

import re
from typing import Iterable

_EMAIL_DOMAIN = re.compile(r"^[^\s@]+@([^\s@]+)$")

SUSPICIOUS_EMAIL_PATTERNS = [
    re.compile(r"^\d+@"),               # local part is all digits
    re.compile(r"@.*\d{4,}"),           # 4+ consecutive digits in the domain
    re.compile(r"[^a-zA-Z0-9@._-]"),    # characters outside the usual set
    re.compile(r"\.{2,}"),              # consecutive dots
    re.compile(r"@[^@+]+\+[^@]+\."),    # plus tag inside the domain
]


def extract_domain(email: str) -> str:
    """Return the part after '@', or "" when the address is malformed."""
    match = _EMAIL_DOMAIN.match(email)
    return match.group(1) if match else ""


def is_suspicious_domain(domain: str, suspicious_domains: Iterable[str]) -> bool:
    """Case-insensitive suffix match against the configured domains."""
    domain_lower = domain.lower()
    return any(domain_lower.endswith(suffix.lower()) for suffix in suspicious_domains)


def is_test_domain(domain: str) -> bool:
    return "test" in domain or "example" in domain


def has_suspicious_email_pattern(email: str) -> bool:
    return any(pattern.search(email) for pattern in SUSPICIOUS_EMAIL_PATTERNS)
