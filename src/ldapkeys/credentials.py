"""Resolution of LDAP bind credentials and TLS options."""

from __future__ import annotations

from pathlib import Path

from .config import ConfigMap, get_setting
from .constants import TLS_OPTIONS
from .exceptions import UnreadableSecretError
from .models.ldap import BindCredentials

__all__ = [
    "read_secret",
    "resolve_credentials",
    "resolve_tls_options",
]


def read_secret(path: Path) -> str | None:
    """Read the bind password from a secret file.

    Parameters
    ----------
    path
        Path to the secret file.  The whole file, with surrounding whitespace
        removed, is the password.

    Returns
    -------
    str or None
        The password, or `None` if the file does not exist or is empty.

    Raises
    ------
    UnreadableSecretError
        Raised if the file exists but could not be read.
    """
    try:
        with path.open("r") as f:
            secret = f.read().strip()
    except FileNotFoundError:
        return None
    except OSError as e:
        msg = f"Cannot read secret file {path}: {e.strerror}"
        raise UnreadableSecretError(msg) from e
    return secret or None


def resolve_credentials(
    settings: ConfigMap, secret: str | None = None
) -> BindCredentials:
    """Determine the DN and password to bind with.

    ``rootbinddn`` is used if ``binddn`` is absent or empty, and the contents
    of the secret file are used if ``bindpw`` is absent or empty.  If neither
    a DN nor a password can be found, the result requests an anonymous bind.

    Parameters
    ----------
    settings
        Parsed configuration settings.
    secret
        Contents of the secret file, if any.

    Returns
    -------
    BindCredentials
        The resolved credentials.
    """
    user_dn = get_setting(settings, "binddn") or get_setting(
        settings, "rootbinddn"
    )
    password = get_setting(settings, "bindpw") or secret
    return BindCredentials(user_dn=user_dn or None, password=password or None)


def resolve_tls_options(settings: ConfigMap) -> dict[str, str]:
    """Collect the TLS options from the configuration.

    Parameters
    ----------
    settings
        Parsed configuration settings.

    Returns
    -------
    dict of str
        Mapping from TLS option name (``capath``, ``clientcert``,
        ``clientkey``, ``cafile``) to its value.  Options whose setting is
        absent are omitted.
    """
    options = {}
    for key, option in TLS_OPTIONS.items():
        value = get_setting(settings, key)
        if value is not None:
            options[option] = value
    return options
