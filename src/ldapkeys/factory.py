"""Create ldapkeys components."""

from __future__ import annotations

from structlog.stdlib import BoundLogger

from .config import Config
from .credentials import resolve_credentials, resolve_tls_options
from .services.keys import KeyService
from .storage.ldap import LDAPStorage

__all__ = ["Factory"]


class Factory:
    """Build ldapkeys components.

    Parameters
    ----------
    config
        ldapkeys configuration.
    secret
        Contents of the secret file holding the bind password, if any.
    logger
        Logger to pass to the created components.
    """

    def __init__(
        self, config: Config, *, secret: str | None, logger: BoundLogger
    ) -> None:
        self._config = config
        self._secret = secret
        self._logger = logger

    def create_key_service(self) -> KeyService:
        """Create a service for looking up public keys.

        Returns
        -------
        KeyService
            Newly-created key service.
        """
        return KeyService(
            config=self._config,
            ldap=self.create_ldap_storage(),
            logger=self._logger,
        )

    def create_ldap_storage(self) -> LDAPStorage:
        """Create the LDAP storage layer.

        Returns
        -------
        LDAPStorage
            Storage layer using the resolved bind credentials.
        """
        settings = self._config.settings
        return LDAPStorage(
            config=self._config,
            credentials=resolve_credentials(settings, self._secret),
            tls_options=resolve_tls_options(settings),
            logger=self._logger,
        )
