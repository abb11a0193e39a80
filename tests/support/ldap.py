"""Mock bonsai LDAP API for testing."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterator
from typing import Any
from unittest.mock import Mock, patch

import bonsai

from ldapkeys.storage import ldap as ldap_storage

_SearchResults = list[dict[str, list[str]]]

__all__ = ["MockLDAP", "MockLDAPClient", "patch_ldap"]


class MockLDAPClient:
    """Mock of `bonsai.LDAPClient` that records how it was configured.

    Parameters
    ----------
    server
        Mock connection returned by `connect`.
    url
        LDAP URL the client was created for.
    tls
        Whether StartTLS was requested.
    """

    def __init__(self, server: MockLDAP, url: str, tls: bool = False) -> None:
        self.server = server
        self.url = url
        self.tls = tls
        self.credentials: tuple[str, str, str] | None = None
        self.cert_policy: str | None = None
        self.ca_cert: str | None = None
        self.ca_cert_dir: str | None = None
        self.client_cert: str | None = None
        self.client_key: str | None = None
        self.timeout: float | None = None

    def set_ca_cert(self, name: str) -> None:
        self.ca_cert = name

    def set_ca_cert_dir(self, path: str) -> None:
        self.ca_cert_dir = path

    def set_cert_policy(self, policy: str) -> None:
        self.cert_policy = policy

    def set_client_cert(self, name: str) -> None:
        self.client_cert = name

    def set_client_key(self, name: str) -> None:
        self.client_key = name

    def set_credentials(
        self, mechanism: str, user: str, password: str
    ) -> None:
        self.credentials = (mechanism, user, password)

    def connect(self, timeout: float | None = None) -> MockLDAP:
        self.timeout = timeout
        return self.server.connect_for_test(self)


class MockLDAP(Mock):
    """Mock bonsai LDAP connection for testing."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(spec=bonsai.LDAPConnection, **kwargs)
        self._entries: dict[tuple[str, str], _SearchResults] = defaultdict(
            list
        )
        self.clients: list[MockLDAPClient] = []
        self.unreachable: set[str] = set()
        self.failing_bases: set[str] = set()
        self.reject_bind = False
        self.closed = False
        self.searches: list[dict[str, Any]] = []

    def add_entries_for_test(
        self, base_dn: str, filter_exp: str, entries: _SearchResults
    ) -> None:
        """Add LDAP entries for testing.

        Parameters
        ----------
        base_dn
            The base DN of a search that should return these entries.
        filter_exp
            The search filter, including outer parentheses, that will be
            used to retrieve these entries.
        entries
            The entries returned by that search, which will be filtered by the
            attribute list.
        """
        self._entries[(base_dn, filter_exp)].extend(entries)

    def close(self) -> None:
        self.closed = True

    def connect_for_test(self, client: MockLDAPClient) -> MockLDAP:
        """Simulate connecting and binding through a mock client."""
        self.clients.append(client)
        if client.url in self.unreachable:
            raise bonsai.ConnectionError(f"Can't contact {client.url}")
        if self.reject_bind:
            raise bonsai.AuthenticationError("Invalid credentials")
        return self

    def search(
        self,
        base: str,
        scope: bonsai.LDAPSearchScope,
        filter_exp: str,
        attrlist: list[str],
        **kwargs: Any,
    ) -> _SearchResults:
        assert "timeout" not in kwargs
        self.searches.append(
            {
                "base": base,
                "scope": scope,
                "filter_exp": filter_exp,
                "attrlist": attrlist,
            }
        )
        if base in self.failing_bases:
            raise bonsai.NoSuchObjectError("No such object")
        results = []
        for entry in self._entries.get((base, filter_exp), []):
            attributes = {a: entry[a] for a in attrlist if a in entry}
            results.append(attributes)
        return results


def patch_ldap() -> Iterator[MockLDAP]:
    """Mock the bonsai API for testing.

    Returns
    -------
    MockLDAP
        The mock LDAP connection.  The clients created to reach it are
        available in its ``clients`` attribute.
    """
    mock_ldap = MockLDAP()

    def create_client(url: str, tls: bool = False) -> MockLDAPClient:
        return MockLDAPClient(mock_ldap, url, tls)

    with patch.object(ldap_storage, "LDAPClient", side_effect=create_client):
        yield mock_ldap
