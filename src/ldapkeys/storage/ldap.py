"""LDAP storage layer for ldapkeys."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import bonsai
from bonsai import LDAPClient, LDAPConnection, LDAPSearchScope
from structlog.stdlib import BoundLogger

from ..config import Config
from ..constants import SEARCH_SCOPES
from ..exceptions import (
    DirectoryBindError,
    DirectoryConnectError,
    DirectorySearchError,
    InvalidConfigValueError,
    InvalidSearchScopeError,
)
from ..models.ldap import BindCredentials, SearchRequest

__all__ = ["LDAPStorage"]


class LDAPStorage:
    """LDAP storage layer.

    Parameters
    ----------
    config
        Configuration for LDAP connections.
    credentials
        Credentials to bind with.  If either the DN or the password is
        missing, an anonymous bind is done.
    tls_options
        TLS options (``capath``, ``clientcert``, ``clientkey``, ``cafile``)
        for StartTLS or ``ldaps`` connections.
    logger
        Logger for debug messages and errors.
    """

    def __init__(
        self,
        config: Config,
        credentials: BindCredentials,
        tls_options: dict[str, str],
        logger: BoundLogger,
    ) -> None:
        self._config = config
        self._credentials = credentials
        self._tls_options = tls_options
        self._logger = logger

    @contextmanager
    def connect(self) -> Iterator[LDAPConnection]:
        """Open an authenticated connection to the first available server.

        Servers from the ``uri`` setting are tried in order.  The connection
        is closed when the context manager exits, including on errors.

        Yields
        ------
        bonsai.LDAPConnection
            The open connection.

        Raises
        ------
        DirectoryBindError
            Raised if the server rejected the credentials.
        DirectoryConnectError
            Raised if no server could be reached.
        """
        conn = self._open()
        try:
            yield conn
        finally:
            conn.close()
            self._logger.info("Disconnected from LDAP")

    def search(
        self, conn: LDAPConnection, request: SearchRequest
    ) -> list[dict[str, list[str]]]:
        """Run a single search.

        Parameters
        ----------
        conn
            Open connection from `connect`.
        request
            Search to run.

        Returns
        -------
        list of dict
            List of result entries, each of which is a dictionary of the
            requested attributes to a list of their values.

        Raises
        ------
        DirectorySearchError
            Raised if the search failed.
        """
        scope = self._get_scope(request.scope)
        filter_exp = request.filter
        if not filter_exp.startswith("("):
            filter_exp = f"({filter_exp})"
        logger = self._logger.bind(
            ldap_attrs=request.attributes,
            ldap_base=request.base,
            ldap_scope=scope.name,
            ldap_search=filter_exp,
        )
        try:
            logger.debug("Querying LDAP")
            results = conn.search(
                base=request.base,
                scope=scope,
                filter_exp=filter_exp,
                attrlist=request.attributes,
            )
        except bonsai.LDAPError as e:
            logger.exception("Cannot query LDAP", error=str(e))
            raise DirectorySearchError(f"Error querying LDAP: {e}") from e
        logger.debug("LDAP entries found", count=len(results))
        return results

    def _build_client(self, url: str) -> LDAPClient:
        """Create a bonsai client for one server URL."""
        try:
            client = LDAPClient(url, tls=self._config.start_tls)
        except ValueError as e:
            msg = f"Invalid LDAP URL {url}: {e}"
            raise InvalidConfigValueError(msg) from e
        if not self._credentials.anonymous:
            client.set_credentials(
                "SIMPLE",
                user=self._credentials.user_dn,
                password=self._credentials.password,
            )
        if self._config.tls_reqcert:
            client.set_cert_policy(self._config.tls_reqcert)
        if "cafile" in self._tls_options:
            client.set_ca_cert(self._tls_options["cafile"])
        if "capath" in self._tls_options:
            client.set_ca_cert_dir(self._tls_options["capath"])
        if "clientcert" in self._tls_options:
            client.set_client_cert(self._tls_options["clientcert"])
        if "clientkey" in self._tls_options:
            client.set_client_key(self._tls_options["clientkey"])
        return client

    def _get_scope(self, scope: str | None) -> LDAPSearchScope:
        if scope is None:
            return LDAPSearchScope.SUBTREE
        try:
            name = SEARCH_SCOPES[scope.lower()]
        except KeyError:
            raise InvalidSearchScopeError(scope) from None
        return LDAPSearchScope[name]

    def _open(self) -> LDAPConnection:
        """Connect, optionally start TLS, and bind.

        bonsai does all three in a single call.  Failure to reach a server
        moves on to the next one, but a rejected bind is fatal.
        """
        if self._credentials.anonymous:
            bind_dn = "<anonymous>"
        else:
            bind_dn = self._credentials.user_dn
        errors = []
        for url in self._config.uri:
            logger = self._logger.bind(
                ldap_url=url,
                ldap_bind_dn=bind_dn,
                start_tls=self._config.start_tls,
                timeout=self._config.timeout,
            )
            client = self._build_client(url)
            try:
                logger.debug("Connecting to LDAP")
                conn = client.connect(timeout=self._config.timeout)
            except bonsai.AuthenticationError as e:
                logger.error("LDAP bind failed", error=str(e))
                msg = f"Cannot bind to {url} as {bind_dn}: {e}"
                raise DirectoryBindError(msg) from e
            except bonsai.LDAPError as e:
                logger.warning("Cannot connect to LDAP", error=str(e))
                errors.append(f"{url}: {e}")
                continue
            logger.info("Connected to LDAP")
            return conn

        msg = "Cannot connect to any LDAP server"
        self._logger.error(msg, errors=errors)
        raise DirectoryConnectError(f"{msg} ({'; '.join(errors)})")
