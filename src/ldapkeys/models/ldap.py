"""Data models for LDAP."""

from __future__ import annotations

from dataclasses import dataclass, field

__all__ = ["BindCredentials", "SearchBase", "SearchRequest"]


@dataclass(frozen=True)
class SearchBase:
    """A search base parsed from an ``nss_base_passwd`` setting.

    The setting has the form ``base?scope``, where either side may be empty.
    """

    base: str | None = None
    """Base DN of the search, if given."""

    scope: str | None = None
    """Scope of the search, if given."""


@dataclass(frozen=True)
class BindCredentials:
    """Credentials used to bind to the LDAP server."""

    user_dn: str | None = None
    """DN to bind as."""

    password: str | None = field(default=None, repr=False)
    """Password for simple bind authentication."""

    @property
    def anonymous(self) -> bool:
        """Whether to do an anonymous bind.

        Simple binds are only done if both a DN and a password are available.
        """
        return not (self.user_dn and self.password)


@dataclass(frozen=True)
class SearchRequest:
    """A single LDAP search for public keys."""

    base: str
    """Base DN of the search."""

    scope: str | None
    """Scope of the search, or `None` for the default (subtree)."""

    filter: str
    """Search filter."""

    attributes: list[str]
    """Attributes to retrieve."""
