"""
Privacy Index

Derives the searchable, non-reversible fields stored next to an invitation
so that "has this identity already been invited?" can be answered without
keeping or decrypting the identity itself.

Accepted risk: the lookup hash is an UNSALTED SHA-256 of the normalized
identity. An attacker holding the table can confirm guesses (or run a
dictionary of known addresses) against it. A salt or keyed hash would defeat
that, and would also make equal identities hash differently, which breaks
deduplication. The product requirement for deduplication wins; changing this
means revisiting that requirement first, not just adding a salt.
"""

import hashlib


def normalize_identity(identity: str) -> str:
    """Trim surrounding whitespace and lowercase."""
    return identity.strip().lower()


def lookup_hash(identity: str) -> str:
    """
    One-way, fixed-length digest of the normalized identity.

    Returns:
        64-character lowercase hex SHA-256 digest
    """
    if identity is None or not identity.strip():
        raise ValueError("Identity must not be empty")
    return hashlib.sha256(normalize_identity(identity).encode("utf-8")).hexdigest()


def derive_domain_tag(identity: str) -> str:
    """
    Organization component of an email-like identity (``jane@acme.com`` -> ``acme.com``).

    Still personal data for retention purposes, but low sensitivity on its own.
    """
    normalized = normalize_identity(identity)
    local, sep, domain = normalized.rpartition("@")
    if not sep or not local or not domain:
        raise ValueError("Identity has no domain component")
    return domain


def hash_prefix(value: str) -> str:
    """Short form of a lookup hash, safe for log lines."""
    return value[:12]
