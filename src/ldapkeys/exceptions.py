"""Exceptions for ldapkeys."""

from __future__ import annotations

from pathlib import Path

__all__ = [
    "ConfigError",
    "DirectoryBindError",
    "DirectoryConnectError",
    "DirectoryError",
    "DirectorySearchError",
    "InvalidAccountNameError",
    "InvalidConfigValueError",
    "InvalidSearchScopeError",
    "LdapKeysError",
    "MalformedConfigLineError",
    "MissingConfigFileError",
    "MissingMandatoryConfigError",
    "UnreadableConfigError",
    "UnreadableSecretError",
]


class LdapKeysError(Exception):
    """Base class for all errors that abort a key lookup."""


class ConfigError(LdapKeysError):
    """The configuration could not be loaded."""


class MissingConfigFileError(ConfigError):
    """The configuration file does not exist.

    Parameters
    ----------
    path
        Path to the missing configuration file.
    """

    def __init__(self, path: Path) -> None:
        super().__init__(f"Configuration file {path} not found")
        self.path = path


class UnreadableConfigError(ConfigError):
    """The configuration file exists but could not be read.

    Parameters
    ----------
    path
        Path to the configuration file.
    error
        Description of the failure.
    """

    def __init__(self, path: Path, error: str) -> None:
        super().__init__(f"Cannot read configuration file {path}: {error}")
        self.path = path


class MalformedConfigLineError(ConfigError):
    """A configuration line could not be split into a key and a value.

    Parameters
    ----------
    line_number
        Line number (starting with 1) of the malformed line.
    line
        Contents of the malformed line.
    """

    def __init__(self, line_number: int, line: str) -> None:
        msg = f"Malformed configuration line {line_number}: {line.strip()}"
        super().__init__(msg)
        self.line_number = line_number


class MissingMandatoryConfigError(ConfigError):
    """Mandatory settings are absent or empty.

    Parameters
    ----------
    keys
        Names of the missing settings.
    """

    def __init__(self, keys: list[str]) -> None:
        msg = f"Missing mandatory configuration: {', '.join(keys)}"
        super().__init__(msg)
        self.keys = keys


class InvalidConfigValueError(ConfigError):
    """A configuration setting has an invalid value."""


class InvalidSearchScopeError(ConfigError):
    """The scope of an ``nss_base_passwd`` setting is not recognized."""

    def __init__(self, scope: str) -> None:
        super().__init__(f"Unknown search scope {scope}")
        self.scope = scope


class UnreadableSecretError(ConfigError):
    """The bind password file exists but could not be read."""


class InvalidAccountNameError(LdapKeysError):
    """The requested account name contains invalid characters.

    Parameters
    ----------
    username
        The rejected account name.
    """

    def __init__(self, username: str) -> None:
        super().__init__(f"Invalid account name {username!r}")
        self.username = username


class DirectoryError(LdapKeysError):
    """An LDAP operation failed."""


class DirectoryConnectError(DirectoryError):
    """Unable to connect to any LDAP server."""


class DirectoryBindError(DirectoryError):
    """The LDAP server rejected the bind."""


class DirectorySearchError(DirectoryError):
    """An LDAP search failed."""
