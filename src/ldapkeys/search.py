"""Construction of public key searches and parsing of their results."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from .config import ConfigMap, get_search_bases, get_setting
from .constants import (
    DEFAULT_FILTER,
    PEOPLE_RDN,
    PUBLIC_KEY_ATTRIBUTES,
    SEARCH_SCOPES,
    USERNAME_REGEX,
)
from .exceptions import InvalidAccountNameError, InvalidSearchScopeError
from .models.ldap import SearchBase, SearchRequest

_KEY_ATTRIBUTES = frozenset(a.lower() for a in PUBLIC_KEY_ATTRIBUTES)

__all__ = [
    "build_filter",
    "extract_public_keys",
    "plan_searches",
    "validate_username",
]


def validate_username(username: str) -> None:
    """Check that an account name is safe to put into a search filter.

    Raises
    ------
    InvalidAccountNameError
        Raised if the name contains anything other than letters, digits,
        periods, underscores, and hyphens.
    """
    if not re.fullmatch(USERNAME_REGEX, username):
        raise InvalidAccountNameError(username)


def build_filter(settings: ConfigMap, username: str) -> str:
    """Build the search filter for an account.

    If ``pam_filter`` is set, the filter matches entries that satisfy it and
    have a ``uid`` of the account name.  Otherwise, it matches any entry with
    a ``cn``.
    """
    pam_filter = get_setting(settings, "pam_filter")
    if pam_filter:
        return f"&({pam_filter})(uid={username})"
    return DEFAULT_FILTER


def plan_searches(settings: ConfigMap, username: str) -> list[SearchRequest]:
    """Build the list of searches to run for an account.

    Parameters
    ----------
    settings
        Parsed configuration settings.
    username
        Account whose keys are wanted.

    Returns
    -------
    list of SearchRequest
        One search per ``nss_base_passwd`` setting, in configuration order,
        or a single search of ``ou=People`` under ``base`` if there are none.

    Raises
    ------
    InvalidAccountNameError
        Raised if the account name is invalid.
    InvalidSearchScopeError
        Raised if a configured search scope is not recognized.
    """
    validate_username(username)
    bases = get_search_bases(settings)
    if not bases:
        base = get_setting(settings, "base") or ""
        bases = [SearchBase(base=f"{PEOPLE_RDN},{base}")]
    search_filter = build_filter(settings, username)
    requests = []
    for search_base in bases:
        scope = search_base.scope
        if scope and scope.lower() not in SEARCH_SCOPES:
            raise InvalidSearchScopeError(scope)
        request = SearchRequest(
            base=search_base.base or "",
            scope=scope,
            filter=search_filter,
            attributes=list(PUBLIC_KEY_ATTRIBUTES),
        )
        requests.append(request)
    return requests


def _as_list(value: Any) -> list[str]:
    if isinstance(value, bytes):
        return [value.decode()]
    if isinstance(value, str):
        return [value]
    return [v.decode() if isinstance(v, bytes) else str(v) for v in value]


def extract_public_keys(entries: Iterable[Mapping[str, Any]]) -> list[str]:
    """Extract the public keys from LDAP search results.

    Parameters
    ----------
    entries
        Search result entries, each a mapping of attribute names to a value
        or list of values.

    Returns
    -------
    list of str
        Every public key value, in the order of the entries and then of the
        values within each entry.  Entries without a public key attribute
        contribute nothing.
    """
    keys = []
    for entry in entries:
        for attr, value in entry.items():
            if attr.lower() in _KEY_ATTRIBUTES:
                keys.extend(_as_list(value))
                break
    return keys
