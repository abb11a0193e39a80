"""Lookup of SSH public keys in LDAP."""

from __future__ import annotations

from collections.abc import Iterator

from structlog.stdlib import BoundLogger

from ..config import Config
from ..search import extract_public_keys, plan_searches
from ..storage.ldap import LDAPStorage

__all__ = ["KeyService"]


class KeyService:
    """Find the SSH public keys for an account.

    This ties together search planning, the LDAP queries, and parsing of the
    results.

    Parameters
    ----------
    config
        ldapkeys configuration.
    ldap
        The underlying LDAP query layer.
    logger
        Logger to use.
    """

    def __init__(
        self, *, config: Config, ldap: LDAPStorage, logger: BoundLogger
    ) -> None:
        self._config = config
        self._ldap = ldap
        self._logger = logger

    def get_keys(self, username: str) -> Iterator[str]:
        """Get the public keys for an account.

        Keys are yielded as each search completes, so keys from earlier
        search bases have already been returned if a later search fails.

        Parameters
        ----------
        username
            Account whose keys are wanted.

        Yields
        ------
        str
            Each public key, in search base order and then directory order.

        Raises
        ------
        InvalidAccountNameError
            Raised if the account name is invalid.  Nothing is sent to LDAP.
        InvalidSearchScopeError
            Raised if a configured search scope is not recognized.
        DirectoryError
            Raised if connecting, binding, or searching failed.
        """
        requests = plan_searches(self._config.settings, username)
        logger = self._logger.bind(user=username)
        logger.debug("Planned LDAP searches", count=len(requests))
        with self._ldap.connect() as conn:
            for request in requests:
                entries = self._ldap.search(conn, request)
                keys = extract_public_keys(entries)
                logger.info(
                    "Found public keys",
                    ldap_base=request.base,
                    count=len(keys),
                )
                yield from keys
