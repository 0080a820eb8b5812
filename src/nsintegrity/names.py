"""
Domain name normalization for NS Integrity.

Resolvers and zone APIs disagree on letter case and on the trailing dot of
fully-qualified names. Every name is normalized with the helpers below before
it is compared or used as a map key.
"""

from __future__ import annotations

from typing import Iterable


def normalize_domain_name(name: str) -> str:
    """
    Normalize a domain or host name for comparison.

    Surrounding whitespace is removed, the name is lower-cased and exactly
    one trailing dot is kept. An empty name stays empty.

    Args:
        name: Domain or host name, with or without trailing dot

    Returns:
        Normalized fully-qualified name
    """
    stripped = name.strip().lower().rstrip(".")
    if not stripped:
        return ""
    return f"{stripped}."


def normalize_names(names: Iterable[str]) -> dict[str, str]:
    """
    Normalize a sequence of names, remembering their original spelling.

    Args:
        names: Names in input order

    Returns:
        Mapping of normalized name to the first original spelling seen
    """
    normalized: dict[str, str] = {}
    for name in names:
        key = normalize_domain_name(name)
        if key and key not in normalized:
            normalized[key] = name
    return normalized


def is_subdomain_of(name: str, parent: str) -> bool:
    """Check whether name lies strictly below parent."""
    child = normalize_domain_name(name)
    apex = normalize_domain_name(parent)
    if not child or not apex or child == apex:
        return False
    return child.endswith(f".{apex}")
